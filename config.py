import os

basedir = os.path.abspath(os.path.dirname(__file__))

# Flask / Storage

SECRET_KEY                      = os.environ.get('MYPASS_SECRET', 'supersecretkey')
SQLALCHEMY_DATABASE_URI         = os.environ.get(
    'MYPASS_DATABASE_URI',
    'sqlite:///' + os.path.join(basedir, 'database', 'mypass.db'),
)
SQLALCHEMY_TRACK_MODIFICATIONS  = False
LOG_LEVEL                       = os.environ.get('MYPASS_LOG_LEVEL', 'INFO')

# Login Rate Gate

LOGIN_MAX_ATTEMPTS              = int(os.environ.get('MYPASS_LOGIN_MAX_ATTEMPTS', 5))
LOGIN_BLOCK_SECONDS             = int(os.environ.get('MYPASS_LOGIN_BLOCK_SECONDS', 15 * 60))
RATE_GATE_MAX_IDENTITIES        = int(os.environ.get('MYPASS_RATE_GATE_MAX_IDENTITIES', 10_000))
RATE_GATE_SWEEP_SECONDS         = 60
TRUST_PROXY_HEADERS             = os.environ.get('MYPASS_TRUST_PROXY_HEADERS', '0') in ('1', 'true', 'True')

# Activity Log

ACTIVITY_LOG_DEFAULT_LIMIT      = 20
ACTIVITY_LOG_MAX_LIMIT          = 100

# Password Generator

GENERATOR_MIN_LENGTH            = 4
GENERATOR_MAX_LENGTH            = 128
GENERATOR_DEFAULT_LENGTH        = 16
