import os

# configuration options the geoloc tool reads from the environment
_envars = (
    'GEOLOC_DEFAULT_LANGUAGE',
    'GEOLOC_LOG_LEVEL',
    'GEOLOC_LOG_STRUCT',
    'GEOLOC_LOG_DATEFORMAT',
)

_saved = {}

def pytest_sessionstart(session):
    for name in _envars:
        valu = os.environ.pop(name, None)
        if valu is not None:
            _saved[name] = valu

def pytest_sessionfinish(session, exitstatus):
    os.environ.update(_saved)
    _saved.clear()
