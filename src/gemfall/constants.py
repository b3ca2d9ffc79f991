BOARD_WIDTH = 8   # pieces per row
BOARD_HEIGHT = 8  # pieces per column

TIME_ALLOWED = 30        # starting seconds in timed mode
TIME_GAIN_PER_PIECE = 1  # seconds gained per removed piece in timed mode
MOVE_BONUS = 10          # flat score for every resolved move

UPDATE_SPEED = 8    # logic ticks per second
ANIMATE_SPEED = 45  # render ticks per second
TIMER_SPEED = 1     # timer ticks per second

# Upper bound on resolve passes while stabilising a freshly filled board.
SETUP_MAX_ITERATIONS = 1000

HIGH_SCORES_FILE = "gemfall_high_scores.txt"

# Window geometry (pixels)
PIECE_SIZE = 35
# Pieces do not fill the whole cell allocated to them.
PIECE_SCALE_FACTOR = 0.8333333
