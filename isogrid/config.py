import math

# Frame settings
# Ticks per second; tween durations are converted to frame counts with this
FPS = 60

# Screen settings
# Used as the external center when the camera follows a character
SCREEN_WIDTH = 800
SCREEN_HEIGHT = 600

# Movement settings
# Speed in pixels per tick for movables that were not given one
DEFAULT_SPEED = 3.0

# Isometric tile settings
# Height of a single isometric tile in pixels
TILE_HEIGHT = 74
# Angle between the top-left edge and the horizontal diagonal of a tile (degrees)
ISO_ANGLE = 30

# Ground map cell codes
TILE_VOID = 0
TILE_FLOOR = 1
TILE_WALL = 2

# Pathfinding settings
# Search 8-connected instead of 4-connected
PATHFINDING_DIAGONAL = False
# Return the path to the closest reachable node when the target is unreachable
PATHFINDING_CLOSEST = False
# Cost multiplier for a diagonal step
DIAGONAL_COST = math.sqrt(2)

# Movement coordination
# Re-run pathfinding at every tile instead of only when the next tile is taken
CHECK_PATH_ON_EACH_TILE = False
# Teleport objects to the destination instead of stepping tile by tile
INSTANT_OBJECT_RELOCATION = False

# Camera follow
# Tween the camera toward the current controllable while it moves
FOLLOW_CHARACTER = True
# Duration of each follow tween (seconds)
CAMERA_FOLLOW_DURATION = 0.1
CAMERA_FOLLOW_EASING = "easeOut"
CAMERA_SCALE = 1.0
