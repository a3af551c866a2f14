"""Physical constants, machine geometry, thresholds, and analysis windows."""

# =============================================================================
# Integration
# =============================================================================

DT = 0.005                      # seconds per tick
SAMPLE_RATE_HZ = 1.0 / DT       # 200 Hz (Nyquist = 100 Hz)
SCREW_PITCH = 0.01              # m per revolution (10 mm ball screw)

# =============================================================================
# Cycle Phases
# =============================================================================

PHASE_IDLE = "IDLE"
PHASE_RAPID_DOWN = "RAPID_DOWN"
PHASE_CUTTING = "CUTTING"
PHASE_RETRACT = "RETRACT"

CYCLE_PHASES = [PHASE_IDLE, PHASE_RAPID_DOWN, PHASE_CUTTING, PHASE_RETRACT]

# Axis geometry (m, positive downward from the top of travel)
RETRACT_Z = 0.05
WORKPIECE_Z = 0.35
BOTTOM_Z = 0.45

# Target axis velocities per phase (m/s). Rapid and cut scale with feed override.
RAPID_VELOCITY = 0.3
CUT_VELOCITY = 0.05
RETRACT_VELOCITY = -0.4

AXIS_TRACKING_GAIN = 0.05       # fraction of velocity error closed per tick
AXIS_KP = 50.0                  # servo gain used for the reported torque

# Cutting force jitter: F = base_force * feed * (1 + U(0, CUTTING_FORCE_JITTER))
CUTTING_FORCE_JITTER = 0.1

# =============================================================================
# Vibration Model
# =============================================================================

EXTENSION_FLOOR = 0.1           # m, minimum axis extension in the stiffness term
WEAR_STIFFNESS_LOSS = 0.5       # stiffness multiplier = 1 - wear * loss
WEAR_STIFFNESS_FLOOR = 0.5

REFERENCE_RPM = 3000.0
UNBALANCE_GAIN = 10 * 0.000005  # N at REFERENCE_RPM for a new spindle
UNBALANCE_WEAR_GAIN = 5.0

CUTTING_HARMONIC = 4            # tooth-pass order of the cutting term
CUTTING_VIB_FRACTION = 0.2
CHATTER_FRACTION = 0.8
CHATTER_FORCE_THRESHOLD = 300.0     # N
CHATTER_STIFFNESS_THRESHOLD = 12000.0  # N/m

DAMPING_REDUCTION_GAIN = 0.001
COOLANT_DAMPING_FACTOR = 1.2

RETRACT_NOISE_FACTOR = 0.1

# =============================================================================
# Motor, Thermal and Lubrication
# =============================================================================

IDLE_LOAD_PCT = 20.0            # % at REFERENCE_RPM with no cut
CUTTING_LOAD_PCT = 60.0         # % per CUTTING_LOAD_REF_FORCE
CUTTING_LOAD_REF_FORCE = 500.0  # N
LOAD_JITTER_PCT = 2.0
RPM_JITTER = 5.0

AMBIENT_TEMP = 22.0             # °C
INITIAL_TEMP = 45.0             # °C
HEAT_PER_LOAD_PCT = 0.8         # °C of steady-state rise per % load
COOLANT_TARGET_OFFSET = 5.0     # °C above ambient with coolant on
THERMAL_RATE_DRY = 0.002        # fraction of gap closed per tick, coolant off
THERMAL_RATE_COOLANT = 0.05     # coolant on

# ISO VG 68 oil, exponential viscosity-temperature approximation
VISCOSITY_AT_25C = 150.0        # cSt
VISCOSITY_TEMP_COEFF = 0.035    # 1/°C

# =============================================================================
# Wear
# =============================================================================

WEAR_FORCE_THRESHOLD = 150.0    # N
WEAR_INCREMENT = 0.0001         # per tick of heavy cutting

WEAR_WARN = 0.5
WEAR_REPLACE = 0.8

# =============================================================================
# Buffers and Windows
# =============================================================================

TELEMETRY_CAPACITY = 200        # samples (1 s at 200 Hz)
HEALTH_WINDOW = 30              # samples
SPECTRUM_MIN_SAMPLES = 32
SPECTRUM_WINDOW = 128

TREND_CAPACITY = 60             # records
TREND_INTERVAL = 0.5            # simulated seconds per record

# =============================================================================
# Health Classification
# =============================================================================

STATUS_OPTIMAL = "OPTIMAL"
STATUS_WARNING = "WARNING"
STATUS_CRITICAL = "CRITICAL"

# Windowed RMS displacement (m) and average load (%)
DISPLACEMENT_WARNING = 0.00002
DISPLACEMENT_CRITICAL = 0.00005
LOAD_WARNING = 80.0
LOAD_CRITICAL = 95.0

# Cycle-lifetime peak vibration velocity (mm/s, ISO 10816 zone limits)
VIBRATION_WARNING_MM_S = 4.5
VIBRATION_CRITICAL_MM_S = 11.2

# Sensor health has no defined derivation; consumers get a healthy default.
SENSOR_HEALTH_DEFAULT = 100.0
SENSOR_STATUS_DEFAULT = "OK"

# =============================================================================
# Prognostics
# =============================================================================

RMS_FROM_PEAK = 0.707
RUL_CRITICAL_LIMIT = 11.2       # mm/s
RUL_MIN_START_VALUE = 0.1       # mm/s floor for the log inversion
RUL_TIME_SCALE = 0.1            # simulated-time scaling of the growth rate
RUL_MAX_SECONDS = 3600.0        # beyond this the estimate is reported stable
RUL_MIN_HISTORY = 5             # trend records required before estimating
RUL_STABLE = float("inf")

STRESS_FACTORS = {
    STATUS_OPTIMAL: 0.05,
    STATUS_WARNING: 0.15,
    STATUS_CRITICAL: 0.35,
}
ACCELERATION_STRESS_SCALE = 10.0    # m/s² per unit of added stress

REFERENCE_VISCOSITY = 68.0      # cSt, ISO VG 68 at 40 °C
VISCOSITY_FLOOR = 1.0           # cSt
REFERENCE_TEMPERATURE = 40.0    # °C

FORECAST_STEPS = 30
FORECAST_STEP_SECONDS = 10.0

# =============================================================================
# Controller Display
# =============================================================================

PROGRAMMED_FEED = 500.0         # mm/min, the F word at 100% override
