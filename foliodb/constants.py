"""
Defaults shared by the CLI, the config loader and the HTTP driver.
"""
API_BASE_URL = "https://api.supabase.com/v1/projects"
DEFAULT_PROJECT_REF = "uykxgbrzpfswbdxtyzlv"
DEFAULT_SCHEMA = "domainfolio"

# Pause between two statements; the Management API throttles bursts.
DEFAULT_DELAY_MS = 300
CLI_DELAY_MS = 200
DEFAULT_TIMEOUT = 30.0

PROJECT_REF_ENV = "SUPABASE_PROJECT_REF"
ACCESS_TOKEN_ENV = "SUPABASE_ACCESS_TOKEN"

# Keychain entry written by `supabase login` (go-keyring backend)
KEYCHAIN_SERVICE = "Supabase CLI"
KEYRING_B64_PREFIX = "go-keyring-base64:"
