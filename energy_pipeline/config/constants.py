"""Pure constants for the energy pipeline. No side effects at import time."""

# === Breaker names ===
NEWS_BREAKER = "news"
MARKET_BREAKER = "market"
AI_BREAKER = "ai"

# === Circuit Breaker ===
DEFAULT_FAILURE_THRESHOLD = 3  # Consecutive failures before opening
DEFAULT_RESET_TIMEOUT = 60.0  # Seconds in OPEN before a probe is allowed

# === Retry (Exponential Backoff) ===
ANALYSIS_MAX_ATTEMPTS = 3
ANALYSIS_BASE_DELAY = 1.0  # seconds: 1s, 2s
NEWS_MAX_ATTEMPTS = 3
NEWS_BASE_DELAY = 2.0  # seconds: 2s, 4s
DEFAULT_MAX_DELAY = 30.0

# === Execution budget (milliseconds) ===
# Serverless-style triggers kill the run at 60s
EXECUTION_BUDGET_MS = 60_000
SLOW_EXECUTION_WARN_MS = 45_000
SLOW_EXECUTION_ALERT_MS = 50_000

# === Timeouts (seconds) ===
DEFAULT_REQUEST_TIMEOUT = 30.0
MARKET_FETCH_TIMEOUT = 20.0
LLM_TIMEOUT = 40.0

# === News search (Tavily) ===
TAVILY_API_URL = "https://api.tavily.com/search"
NEWS_QUERIES = [
    "OPEC production cuts oil prices",
    "Federal Reserve interest rates energy sector",
    "energy infrastructure pipeline refinery",
    "oil gas inventory report EIA",
    "energy company earnings results",
    "renewable energy policy government",
]
NEWS_INCLUDE_DOMAINS = [
    "bloomberg.com",
    "reuters.com",
    "wsj.com",
    "ft.com",
    "cnbc.com",
    "marketwatch.com",
    "oilprice.com",
    "energyvoice.com",
]
NEWS_EXCLUDE_DOMAINS = ["reddit.com", "twitter.com", "facebook.com"]
NEWS_MAX_RESULTS_PER_QUERY = 10
NEWS_TOP_N = 15
# Ranking weights: relevance score vs. recency
NEWS_SCORE_WEIGHT = 0.7
NEWS_RECENCY_WEIGHT = 0.3

# === Market symbols (Yahoo Finance) ===
ENERGY_SYMBOLS = {
    # Commodities
    "CRUDE_OIL_WTI": "CL=F",
    "CRUDE_OIL_BRENT": "BZ=F",
    "NATURAL_GAS": "NG=F",
    "HEATING_OIL": "HO=F",
    "GASOLINE": "RB=F",
    # Energy ETFs
    "ENERGY_SELECT_SECTOR": "XLE",
    "OIL_SERVICES": "OIH",
    "ENERGY_INFRASTRUCTURE": "ENFR",
    # Majors
    "EXXON_MOBIL": "XOM",
    "CHEVRON": "CVX",
    "CONOCOPHILLIPS": "COP",
    "SHELL": "SHEL",
    "BP": "BP",
    "TOTAL_ENERGIES": "TTE",
    # Renewables & Utilities
    "NEXTERA_ENERGY": "NEE",
    "FIRST_SOLAR": "FSLR",
    "ENPHASE_ENERGY": "ENPH",
    "TESLA": "TSLA",
    # Pipelines
    "KINDER_MORGAN": "KMI",
    "ENTERPRISE_PRODUCTS": "EPD",
    "ENBRIDGE": "ENB",
}
MARKET_HISTORY_PERIOD = "5d"

# === Analysis (LLM) ===
DEFAULT_LLM_MODEL = "groq/llama-3.3-70b-versatile"
LLM_TEMPERATURE = 0.3
LLM_MAX_TOKENS = 2500
PROMPT_NEWS_CONTENT_CHARS = 300
FALLBACK_CONFIDENCE = 50
FALLBACK_SOURCE_URL = "https://energy-pulse.vercel.app"

# === Delivery (Telegram) ===
TELEGRAM_API_BASE = "https://api.telegram.org"
TELEGRAM_MAX_MESSAGE_LENGTH = 4096
# Telegram allows ~30 messages/second across chats
TELEGRAM_SEND_RATE = 25.0
TELEGRAM_SEND_BURST = 25

# === Response ===
REASONING_PREVIEW_CHARS = 200
