"""
Configuration for the single-channel bank queue simulation.
"""

# ============================================================================
# QUEUE PARAMETERS (M/M/1)
# ============================================================================

# Arrival process: Poisson with exponential interarrival times
ARRIVAL_RATE = 4.0  # customers/min (λ = 4, mean interarrival = 15 s)

# Service time: exponential
SERVICE_RATE = 5.0  # customers/min (μ = 5, mean service = 12 s)

# Practical slider ranges for the rates (customers/min)
MIN_RATE = 1.0
MAX_RATE = 15.0

# ============================================================================
# DRIVER
# ============================================================================

# Simulated seconds per wall-clock second
SPEED_MULTIPLIER = 1.0
SPEED_OPTIONS = (1.0, 5.0, 20.0)

# Wall-clock seconds between ticks (one animation frame at 60 fps)
TICK_INTERVAL = 1.0 / 60.0

# Process every event crossed during a tick instead of at most one arrival
# and one departure per tick
CATCH_UP = False

# ============================================================================
# HISTORY
# ============================================================================

# Rolling window of (second, queue length) samples kept for the trend chart
HISTORY_CAPACITY = 30

# ============================================================================
# BATCH RUNS
# ============================================================================

RUN_DURATION = 600.0  # wall-clock seconds driven per run
NUM_SEEDS = 5  # number of independent runs
RANDOM_SEED_BASE = 42

# ============================================================================
# OUTPUT
# ============================================================================

OUTPUT_DIR = "outputs"
LOG_DIR = f"{OUTPUT_DIR}/logs"
PLOT_DIR = f"{OUTPUT_DIR}/plots"
REPORT_DIR = f"{OUTPUT_DIR}/reports"

# CSV event log columns
EVENT_LOG_COLUMNS = [
    "timestamp",
    "event_type",  # "arrival", "service_start", "departure"
    "customer_id",
    "queue_length",
    "service_time",  # None for arrival events
]
