"""Track and mapping records shared by the tests."""

# Ground truth: track 10 divides into 12 at frame 2, track 44 lives one frame.
GT_TRACKS = ["10 0 1 0", "12 2 5 10", "44 1 1 0"]
# Result: track 1 covers 10 and the start of 12, track 2 continues as its child.
RES_TRACKS = ["1 0 2 0", "2 3 5 1"]
MAPPING = ["1 0 10", "1 1 10", "1 2 12", "2 3 12", "2 4 12", "2 5 12"]


def as_text(lines):
    return "\n".join(lines) + "\n"
