# constants.py
"""
Application-level constants.

These values are static and do not change between simulation runs.
They cover the fixed parts of the particle morph engine, such as the
speed-to-color palette, the seed offsets per generator kind and the
timings of morphs and pointer attraction. Tunable values (spring,
damping, pointer radius and force) live in config.json instead.
"""

# --- Modes ---
MODE_CLOUD = "cloud"
MODE_TEXT = "text"
MODE_CIRCLE = "circle"
MODE_HEART = "heart"
MODE_IMAGE = "image"
MODES = (MODE_CLOUD, MODE_TEXT, MODE_CIRCLE, MODE_HEART, MODE_IMAGE)

DEFAULT_TEXT = "CRAVEAI"
MAX_TEXT_LENGTH = 14

# --- Particle count limits (host controls) ---
MIN_PARTICLES = 5000
MAX_PARTICLES = 30000
PARTICLE_STEP = 1000

# --- Seed offsets ---
# Every generator seeds its RNG with (offset + particle count) so the same
# count always reproduces the same shape.
CLOUD_SEED = 3001
CIRCLE_SEED = 1111
HEART_SEED = 2222
TEXT_SEED = 7001
IMAGE_SEED = 9001
PERMUTATION_SEED = 1337
SPAWN_SEED = 4242

# --- Target geometry ---
CLOUD_SPREAD_XY = 12.0
CLOUD_SPREAD_Z = 4.0
CIRCLE_RADIUS = 4.2
HEART_SCALE = 0.3
WORLD_SCALE = 8.0
RASTER_WIDTH = 1024
RASTER_HEIGHT = 512
TEXT_FONT_SIZE = 230
TEXT_STRIDE = 3
TEXT_THRESHOLD = 10
IMAGE_STRIDE = 3
IMAGE_ALPHA_THRESHOLD = 20
RESAMPLE_JITTER = 0.02
SPAWN_JITTER = 0.02

# --- Timing ---
MORPH_DURATION = 0.8       # seconds
ATTRACT_DURATION = 1.0     # seconds a pointer press keeps the force attracting
MAX_FRAME_DT = 1.0 / 30.0  # frame delta clamp
DAMPING_REFERENCE_HZ = 60.0

# --- Pointer force ---
POINTER_EPSILON = 1e-6
MIN_POINTER_RADIUS = 0.3
MAX_POINTER_RADIUS = 4.0
POINTER_RADIUS_STEP = 0.15

# --- Swirl: az += sin((x + y) * K1 + t * K2) * K3 ---
SWIRL_SPATIAL_FREQUENCY = 0.45
SWIRL_TIME_FREQUENCY = 1.8
SWIRL_STRENGTH = 0.45

# --- Speed-to-color ---
BASE_COLOR = (0.2, 0.78, 1.0)
FAST_COLOR = (1.0, 0.48, 0.3)
SPEED_COLOR_SCALE = 0.35
