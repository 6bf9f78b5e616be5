import os
from pathlib import Path
from datetime import timedelta
from dotenv import load_dotenv

# === BASE DIR ===
BASE_DIR = Path(__file__).resolve().parent.parent
# Cargar variables desde backend/.env
load_dotenv(BASE_DIR / ".env")

# === HELPERS ===
def _bool(value, default=False):
    if value is None:
        return default
    return str(value).strip().lower() in ("1", "true", "t", "yes", "y", "on")


# === CORE ===
SECRET_KEY = (
    os.getenv("DJANGO_SECRET_KEY")
    or os.getenv("SECRET_KEY")
    or "dev-secret-key-change-me"
)

# En producción debe estar en False; por defecto se desactiva salvo que se explicite.
DEBUG = _bool(os.getenv("DJANGO_DEBUG") or os.getenv("DEBUG"), False)

# Hosts permitidos
_hosts_env = os.getenv("DJANGO_ALLOWED_HOSTS") or os.getenv(
    "ALLOWED_HOSTS", "localhost,127.0.0.1,testserver"
)
ALLOWED_HOSTS = (
    ["*"]
    if "*" in _hosts_env
    else [h.strip() for h in _hosts_env.split(",") if h.strip()]
)

# === INSTALLED APPS ===
INSTALLED_APPS = [
    # Django apps
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",

    # Terceros
    "rest_framework",
    "rest_framework_simplejwt",
    "corsheaders",

    # Apps locales
    "common",
    "policies",
    "cobranzas",
]

# === MIDDLEWARE ===
MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "corsheaders.middleware.CorsMiddleware",  # CORS alto y antes de Common
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]


# === CORS / CSRF ===
_frontend_env = os.getenv("FRONTEND_ORIGINS") or os.getenv(
    "FRONTEND_ORIGIN", "http://localhost:3000,http://127.0.0.1:3000"
)
CORS_ALLOWED_ORIGINS = [o.strip() for o in _frontend_env.split(",") if o.strip()]
CORS_ALLOW_CREDENTIALS = _bool(os.getenv("CORS_ALLOW_CREDENTIALS"), False)

# En dev liberamos CORS; en prod solo orígenes listados
CORS_ALLOW_ALL_ORIGINS = bool(DEBUG)

CSRF_TRUSTED_ORIGINS = [
    o for o in CORS_ALLOWED_ORIGINS if o.startswith(("http://", "https://"))
]


# === URLS / WSGI ===
ROOT_URLCONF = "corredora.urls"

# URL del panel de administración (configurable por .env)
ADMIN_URL = os.getenv("ADMIN_URL", "admin/")

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "corredora.wsgi.application"


# === DATABASE ===
if os.getenv("DB_ENGINE"):
    DATABASES = {
        "default": {
            "ENGINE": os.getenv("DB_ENGINE"),
            "NAME": os.getenv("DB_NAME"),
            "USER": os.getenv("DB_USER"),
            "PASSWORD": os.getenv("DB_PASSWORD"),
            "HOST": os.getenv("DB_HOST"),
            "PORT": os.getenv("DB_PORT"),
            # Cada request de cobranzas abre su propio atomic(); no envolvemos la vista completa.
            "ATOMIC_REQUESTS": False,
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }
    }


# === DRF / JWT ===
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": (
        "rest_framework_simplejwt.authentication.JWTAuthentication",
    ),
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.IsAuthenticated"
    ],
    "DEFAULT_PAGINATION_CLASS": "rest_framework.pagination.PageNumberPagination",
    "PAGE_SIZE": int(os.getenv("API_PAGE_SIZE", "25")),
    "COERCE_DECIMAL_TO_STRING": True,
}

# En producción, solo JSON (sin UI browsable).
if not DEBUG:
    REST_FRAMEWORK["DEFAULT_RENDERER_CLASSES"] = (
        "rest_framework.renderers.JSONRenderer",
    )

SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(hours=int(os.getenv("JWT_ACCESS_HOURS", "8"))),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=int(os.getenv("JWT_REFRESH_DAYS", "7"))),
    "ROTATE_REFRESH_TOKENS": True,
    "AUTH_HEADER_TYPES": ("Bearer",),
    "ALGORITHM": os.getenv("JWT_ALGORITHM", "HS256"),
    "SIGNING_KEY": os.getenv("JWT_SIGNING_KEY", SECRET_KEY),
}


# === COBRANZAS ===
# Colaborador externo que confirma que el comprobante existe y pertenece a la cuota.
COBRANZAS_PROOF_CHECKER = os.getenv(
    "COBRANZAS_PROOF_CHECKER", "cobranzas.proofs.StorageProofChecker"
)
# Callable(request) -> queryset de cuotas visibles para el usuario (scoping externo).
COBRANZAS_SCOPE_RESOLVER = os.getenv(
    "COBRANZAS_SCOPE_RESOLVER", "cobranzas.scope.all_installments"
)
COBRANZAS_PROOF_PREFIX = os.getenv("COBRANZAS_PROOF_PREFIX", "comprobantes")


# === INTERNACIONALIZACIÓN ===
LANGUAGE_CODE = "es-bo"
TIME_ZONE = os.getenv("TIME_ZONE", "America/La_Paz")
USE_I18N = True
USE_TZ = True


# === STATIC & MEDIA ===
STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

# Los comprobantes viven en el storage por defecto; el core solo guarda la referencia.
MEDIA_ROOT = os.getenv("MEDIA_ROOT", BASE_DIR / "media")
MEDIA_URL = os.getenv("MEDIA_URL", "/media/")


# === LOGGING BÁSICO ===
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {"format": "%(asctime)s %(levelname)s %(name)s %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "verbose"},
    },
    "root": {
        "handlers": ["console"],
        "level": LOG_LEVEL,
    },
    "loggers": {
        "cobranzas": {"level": os.getenv("COBRANZAS_LOG_LEVEL", LOG_LEVEL)},
    },
}

# === SECURITY / COOKIES ===
# Ajustes pensados para producción; controlables por env.
SESSION_COOKIE_SECURE = _bool(os.getenv("SESSION_COOKIE_SECURE"), not DEBUG)
CSRF_COOKIE_SECURE = _bool(os.getenv("CSRF_COOKIE_SECURE"), not DEBUG)
SESSION_COOKIE_SAMESITE = os.getenv("SESSION_COOKIE_SAMESITE", "Lax")
CSRF_COOKIE_SAMESITE = os.getenv("CSRF_COOKIE_SAMESITE", "Lax")
SECURE_CONTENT_TYPE_NOSNIFF = True
# La redirección HTTPS la hace el proxy; se habilita explícitamente.
SECURE_SSL_REDIRECT = _bool(os.getenv("SECURE_SSL_REDIRECT"), False)
SECURE_HSTS_SECONDS = int(os.getenv("SECURE_HSTS_SECONDS", "0"))
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
SESSION_COOKIE_HTTPONLY = True
CSRF_COOKIE_HTTPONLY = False


# === DEFAULTS ===
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"
