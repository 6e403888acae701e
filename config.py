# Pathfinding visualizer settings

# MQTT Configuration
MQTT_BROKER = "localhost"
MQTT_PORT = 1883
MQTT_KEEPALIVE = 60
MQTT_QOS = 1  # QoS 1 keeps per-topic delivery order
MQTT_TOPIC_UPDATES = "pathfinder/map/updates"
MQTT_TOPIC_RUN_REQUEST = "pathfinder/run/request"

# World Configuration
WORLD_WIDTH = 30
WORLD_HEIGHT = 15
HAS_BOUNDARY = True
MIN_WORLD_SIZE = 8
MAX_WORLD_SIZE = 400
WALL_CELLS_PER_ATTEMPT = 3  # one random wall attempt per this many cells

# Run Configuration
STEP_DELAY_MS = 25
MAX_STEP_DELAY_MS = 100
MAX_CELL_QUEUE = 10  # mutations per batch message when not animating

# Edge cost multiplier when stepping away from the goal
AWAY_FROM_GOAL_PENALTY = 10

# Without a boundary the frontier never runs dry; give up after this many expansions per world cell
UNBOUNDED_EXPANSIONS_PER_CELL = 16

# Display Configuration
CELL_SIZE = 40
WINDOW_WIDTH = CELL_SIZE * WORLD_WIDTH
WINDOW_HEIGHT = CELL_SIZE * WORLD_HEIGHT
FPS = 60

# Colors
WHITE = (255, 255, 255)
BLACK = (0, 0, 0)
GRID_COLOR = (68, 68, 68)

CELL_COLORS = {
    "wall": (136, 159, 159),
    "start": (255, 0, 0),
    "goal": (0, 255, 0),
    "calculating": (0, 0, 255),
    "calculated": (119, 119, 119),
    "path": (221, 221, 0),
}

# Key bindings
KEY_BINDINGS = {
    "restart": "r",
    "toggle_grid": "g",
    "toggle_restart_message": "u",
}
