"""Fixed design constants. Tunable values live in Settings instead."""

# Proposition engine
BATCH_SIZE = 10
RAW_EXCERPT_CHARS = 200
DEFAULT_CONFIDENCE = 0.5
MIN_SCORE = 0
MAX_SCORE = 9
TRIVIALLY_TRUE_REASONING = "precondition not met (trivially true)"

# Trajectory windows (first_n, last_n)
EVALUATION_WINDOW = (10, 100)
ANTI_CONVERGENCE_WINDOW = (5, 15)
VARIETY_WINDOW = (5, 20)

# Quality gate
OTHER_SPEAKER = "other"

# Statistics rollup
SIMILARITY_FAILURE_THRESHOLD = 0.6
STATISTICS_LOG_LIMIT = 10000

# Incomplete beta continued fraction
BETA_CF_EPSILON = 1e-10
BETA_CF_MAX_ITERATIONS = 200
BETA_CF_TINY = 1e-30

# Repetition suppression
REPETITION_THRESHOLD = 0.3
REPETITION_NGRAM_SIZE = 3
REPETITION_MESSAGE_COUNT = 5
REPETITION_MAX_LISTED_NGRAMS = 10

# Hard-mode scoring penalty applied to any score below MAX_SCORE
HARD_MODE_FACTOR = 0.8
