# --- Display ---
WIDTH = 960
HEIGHT = 540
FPS = 60

# --- Road / World ---
ROAD_TILE_MIN_FRAC = 0.4             # min tile width as a fraction of screen width
ROAD_TILE_MAX_FRAC = 1.5             # max tile width as a fraction of screen width
ROAD_AHEAD_SCREENS = 2               # keep tiles generated this many screens ahead
FALL_SPEED = 10.0                    # px/frame once falling through a gap

# --- Actor ---
ACTOR_X_FRAC = 1 / 3                 # actor's fixed x (world scrolls left)
PLAYER_W = 40
PLAYER_H = 56
MAX_WALK_SPEED = 5.0                 # px/frame
MAX_RUN_SPEED = 15.0                 # px/frame
VELOCITY_FACTOR = 0.1                # exponential approach towards target speed
DOUBLE_PRESS_S = 0.3                 # double tap window for running (sec)
JUMP_DURATION_S = 0.5                # one jump arc (sec)

# --- Auto-run power-up (diamond) ---
AUTO_RUN_SPEED = 18.0
AUTO_RUN_DURATION_S = 5.0
AUTO_RUN_EXIT_FRAC = 0.67            # must be inside this much of a tile to stop

# --- Level generation ---
MAX_LEVEL = 12
BATCH_SCREENS_BASE = 6               # batch width = screen_width * (base + level)
LEVEL_DISTANCE_SCREENS = 3           # distance per level-up, in screen widths
SEED_DEFAULT = 12345

# Jump distances derived from speed tiers (px)
WALK_JUMP_DISTANCE = JUMP_DURATION_S * FPS * MAX_WALK_SPEED     # 150
RUN_JUMP_DISTANCE = JUMP_DURATION_S * FPS * MAX_RUN_SPEED       # 450
MIN_TILE_SPACE = WALK_JUMP_DISTANCE * 0.5
MAX_TILE_SPACE = RUN_JUMP_DISTANCE * 0.9

# Diamonds per tier (4-6, 7-9, 10-12) and cap per level inside a tier
DIAMONDS_PER_TIER = (1, 3, 5)
MAX_DIAMONDS_PER_LEVEL = 2

# --- Obstacles (index = ObstacleTier: low, mid, high) ---
OBSTACLE_SIZES = ((36, 28), (40, 32), (44, 36))   # (w, h) px
LIFE_COSTS = (1, 1, 2)
OBSTACLE_WALK_SPEED = 0.5            # mid tier lateral px/frame
OBSTACLE_HOP_FRAMES = 60             # high tier hop length
OBSTACLE_HOP_FRAC = 0.7              # hop height as a fraction of jump peak

# --- Gems ---
GEM_SIZES = {"heart": (28, 28), "diamond": (32, 32)}

# --- Scoring / Lives ---
START_LIVES = 2
TILE_SCORE = 10
JUMP_OVER_SCORE = 50
LEVEL_UP_SCORE = 300
LEVEL_UP_LIVES = 2
HEART_LIVES = 1

# --- Avatars (fall / collision thresholds as fractions of actor width) ---
AVATAR_PROFILES = (
    {"name": "girl", "fall_threshold": 0.5, "collision_threshold": 0.9},
    {"name": "boy", "fall_threshold": 0.6, "collision_threshold": 0.8},
)
CITY_COUNT = 8

# --- Colors (RGB) ---
COLOR_BG = (45, 51, 107)
COLOR_FG = (250, 241, 230)
COLOR_ACCENT = (120, 200, 255)
COLOR_ROAD = (128, 128, 128)
COLOR_DANGER = (255, 86, 110)
COLOR_OBSTACLES = ((80, 140, 255), (90, 200, 110), (230, 70, 70))
COLOR_GEMS = {"heart": (243, 0, 103), "diamond": (150, 230, 255)}
COLOR_PARALLAX = ((60, 66, 128), (75, 82, 150), (92, 100, 170))
