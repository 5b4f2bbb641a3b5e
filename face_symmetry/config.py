LOG_FILE = "symmetry_debug.log"

# Capture
CAMERA_INDEX = 0
CAMERA_WIDTH = 1280
CAMERA_HEIGHT = 720
CAMERA_FPS = 30
CAMERA_BUFFERSIZE = 1
WARMUP_FRAMES = 10
LOG_INTERVAL = 30

# MediaPipe Face Mesh
MIN_DETECTION_CONFIDENCE = 0.5
MIN_TRACKING_CONFIDENCE = 0.5
REFINE_LANDMARKS = False

# Normalization
REFERENCE_SCALE_FLOOR = 0.04
ROLL_TOLERANCE_DEG = 5.0

# Clinical metrics
APERTURE_FLOOR = 1e-6
MOUTH_WIDTH_FLOOR = 1e-6
MOUTH_ANGLE_LIMIT_DEG = 12.0
SMILE_DENTAL_THRESHOLD = 0.25

# Composition
EYE_BILATERAL_WEIGHT = 0.5
MOUTH_WEIGHTS_NEUTRAL = {"vertical": 0.4, "angle": 0.2}
MOUTH_WEIGHTS_SMILING = {"vertical": 0.2, "angle": 0.1}
ZONE_WEIGHTS = {"eyes": 0.32, "mouth": 0.38, "jaw": 0.18, "nose": 0.12}
CRITICAL_FLOOR_WEIGHT = 0.6

# Temporal smoothing
BLEND_NEW_WEIGHT = 0.8
WINDOW_CAPACITY = 80
WINDOW_STRIDE = 8
MIRROR_DISTANCE_GAIN = 200.0
MIRROR_ZONE_WEIGHTS = {"mouth": 0.5, "eyes": 0.25, "jaw": 0.25}

# Presentation
SCORE_DECIMALS = 1
RATING_HIGH = 75.0
RATING_MEDIUM = 45.0
SERIES_SAMPLE_INTERVAL = 0.1
SERIES_MAX_POINTS = 3000
