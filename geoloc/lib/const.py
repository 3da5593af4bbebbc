import enum
import logging

# Logging related constants
LOG_FORMAT = '%(asctime)s [%(levelname)s] %(message)s ' \
             '[%(filename)s:%(funcName)s:%(threadName)s:%(processName)s]'
LOG_LEVEL_CHOICES = {
    'DEBUG': logging.DEBUG,
    'INFO': logging.INFO,
    'WARNING': logging.WARNING,
    'ERROR': logging.ERROR,
    'CRITICAL': logging.CRITICAL,
}
LOG_LEVEL_INVERSE_CHOICES = {v: k for k, v in LOG_LEVEL_CHOICES.items()}

class Format(enum.Enum):
    NONE = 0
    CIVIC_ADDRESS = 1
    GML = 2
    URI = 3

class PidfElement(enum.Enum):
    NONE = 0
    TUPLE = 1
    DEVICE = 2
    PERSON = 3

class Disposition(enum.Enum):
    DISCARD = 0
    APPEND = 1
    PREPEND = 2
    REPLACE = 3

# display names for each member
formatnames = {
    Format.NONE: '<none>',
    Format.CIVIC_ADDRESS: 'civicAddress',
    Format.GML: 'GML',
    Format.URI: 'URI',
}

pidfnames = {
    PidfElement.NONE: '<none>',
    PidfElement.TUPLE: 'tuple',
    PidfElement.DEVICE: 'device',
    PidfElement.PERSON: 'person',
}

dispnames = {
    Disposition.DISCARD: 'discard',
    Disposition.APPEND: 'append',
    Disposition.PREPEND: 'prepend',
    Disposition.REPLACE: 'replace',
}

def _getByName(names, text):
    text = text.strip().lower()
    for memb, name in names.items():
        if name.lower() == text:
            return memb
    return None

def getFormat(text):
    '''
    Return the Format member for a configured name or None.
    '''
    return _getByName(formatnames, text)

def getPidfElement(text):
    '''
    Return the PidfElement member for an element name or None.
    '''
    if text is None:
        return None
    return _getByName(pidfnames, text)

def getDisposition(text):
    return _getByName(dispnames, text)
