'''
Effective location profile resolution for telephony sessions.
'''

import sys
if (sys.version_info.major, sys.version_info.minor) < (3, 8):  # pragma: no cover
    raise Exception('geoloc is not supported on Python versions < 3.8')
