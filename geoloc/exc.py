'''
Exceptions used by geoloc, all inheriting from GeoErr
'''

class GeoErr(Exception):

    def __init__(self, *args, **info):
        self.errinfo = info
        self.errname = self.__class__.__name__
        Exception.__init__(self, self._getExcMsg())

    def _getExcMsg(self):
        props = sorted(self.errinfo.items())
        displ = ' '.join(['%s=%r' % (p, v) for (p, v) in props])
        return '%s: %s' % (self.__class__.__name__, displ)

    def _setExcMesg(self):
        '''Should be called when self.errinfo is modified.'''
        self.args = (self._getExcMsg(),)

    def __setstate__(self, state):
        '''Pickle support.'''
        super(GeoErr, self).__setstate__(state)
        self._setExcMesg()

    def items(self):
        return {k: v for k, v in self.errinfo.items()}

    def get(self, name, defv=None):
        '''
        Return a value from the errinfo dict.

        Example:

            try:
                gml.validate(vlist)
            except GeoErr as e:
                name = e.get('name')

        '''
        return self.errinfo.get(name, defv)

    def set(self, name, valu):
        '''
        Set a value in the errinfo dict.
        '''
        self.errinfo[name] = valu
        self._setExcMesg()

    def setdefault(self, name, valu):
        '''
        Set a value in errinfo dict if it is not already set.
        '''
        if name in self.errinfo:
            return
        self.errinfo[name] = valu
        self._setExcMesg()

    def update(self, items: dict):
        '''Update multiple items in the errinfo dict at once.'''
        self.errinfo.update(items)
        self._setExcMesg()

class BadArg(GeoErr):
    ''' Improper function arguments '''
    pass

class BadConfValu(GeoErr):
    '''
    The configuration value provided is not valid.

    This should contain the config name, valu and mesg.
    '''
    pass

class NeedConfValu(GeoErr): pass

class SchemaViolation(GeoErr): pass

# location variable list validation
class BadVarName(GeoErr):
    '''
    A variable name is not valid for the location format.
    '''
class BadVarValu(GeoErr):
    '''
    A variable value did not pass the validator for its attribute.
    '''
class NoShapeType(GeoErr):
    '''
    A GML variable list has no "type" variable.
    '''
class BadShapeType(GeoErr):
    '''
    A GML variable list has a "type" which is not a known shape.
    '''
class NotEnoughVars(GeoErr): pass
class TooManyVars(GeoErr): pass

# configured records
class BadLocation(GeoErr): pass
class BadProfile(GeoErr): pass
class NoSuchLocation(GeoErr): pass
class NoSuchProfile(GeoErr): pass

# signaled location data
class BadUri(GeoErr): pass
class BadPidfDoc(GeoErr): pass
class BadPidfFormat(GeoErr): pass
class BadPidfLocation(GeoErr): pass
class NoPidfLocation(GeoErr): pass
class NoPidfBody(GeoErr): pass
