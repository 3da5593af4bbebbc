'''
The registry of configured location and profile records.

Records are loaded from a mapping ( usually a YAML file ) of object name to
object definition where the definition "type" is either "location" or
"profile"::

    office:
        type: location
        format: civicAddress
        location: country=AU, state_province=NSW, city=Wollongong

    office-caller:
        type: profile
        location_reference: office
        location_refinement: floor=3
        location_disposition: prepend
        send_location: yes

Records which fail validation are logged and skipped without preventing the
remaining records from loading.
'''
import logging
import threading

import yaml

import geoloc.exc as g_exc
import geoloc.common as g_common

import geoloc.lib.gml as g_gml
import geoloc.lib.const as g_const
import geoloc.lib.config as g_config
import geoloc.lib.varlist as g_varlist
import geoloc.lib.civicaddr as g_civicaddr

logger = logging.getLogger(__name__)

_varlistdef = {'type': ['string', 'object', 'array', 'null'], 'default': None}
_booldef = {'type': ['boolean', 'string'], 'default': False}

locdefs = {
    'type': {'type': 'string', 'enum': ['location']},
    'format': {'type': 'string', 'default': '<none>',
               'description': 'The location format: civicAddress, GML or URI.'},
    'location': _varlistdef,
}

profdefs = {
    'type': {'type': 'string', 'enum': ['profile']},
    'location_reference': {'type': 'string', 'default': '',
                           'description': 'The name of the location record to use.'},
    'pidf_element': {'type': 'string', 'default': 'device',
                     'enum': ['tuple', 'device', 'person']},
    'location_disposition': {'type': 'string', 'default': 'discard',
                             'enum': ['discard', 'append', 'prepend', 'replace']},
    'geolocation_routing': _booldef,
    'send_location': _booldef,
    'location_refinement': _varlistdef,
    'location_variables': _varlistdef,
    'usage_rules': _varlistdef,
}

reqLocDef = g_config.getJsValidator(g_config.getJsSchema(locdefs))
reqProfDef = g_config.getJsValidator(g_config.getJsSchema(profdefs))

def _normBool(name, valu):
    if isinstance(valu, bool):
        return valu

    text = valu.strip().lower()
    if text in ('yes', 'true', 'on', '1', 'y'):
        return True
    if text in ('no', 'false', 'off', '0', 'n'):
        return False

    raise g_exc.BadConfValu(mesg=f'Invalid boolean value {valu!r} for {name}', name=name, valu=valu)

def _reqSchema(func, name, info):
    try:
        return func(dict(info))
    except g_exc.SchemaViolation as e:
        raise g_exc.BadConfValu(mesg=f'Invalid definition for {name!r}: {e.get("mesg")}', name=name) from None

def _normVarList(objname, field, valu):
    try:
        return g_varlist.VarList.norm(valu)
    except g_exc.BadArg as e:
        raise g_exc.BadConfValu(mesg=f'Invalid {field} for {objname!r}: {e.get("mesg")}',
                                name=objname, field=field) from None

class Location:
    '''
    A named location record.
    '''
    def __init__(self, name, form, location_vars):
        self.name = name
        self.format = form
        self.location_vars = location_vars

    @classmethod
    def fromInfo(cls, name, info):
        info = _reqSchema(reqLocDef, name, info)

        form = g_const.getFormat(info.get('format'))
        if form is None:
            raise g_exc.BadConfValu(mesg=f'Location {name!r} has an invalid format {info.get("format")!r}',
                                    name=name, format=info.get('format'))

        return cls(name, form, _normVarList(name, 'location', info.get('location')))

    def pack(self):
        return {
            'name': self.name,
            'format': g_const.formatnames[self.format],
            'location': self.location_vars.join(),
        }

class Profile:
    '''
    A named profile record.
    '''
    def __init__(self, name, location_reference='', pidf_element=g_const.PidfElement.DEVICE,
                 disposition=g_const.Disposition.DISCARD, geolocation_routing=False, send_location=False,
                 location_refinement=None, location_variables=None, usage_rules=None):
        self.name = name
        self.location_reference = location_reference
        self.pidf_element = pidf_element
        self.disposition = disposition
        self.geolocation_routing = geolocation_routing
        self.send_location = send_location
        self.location_refinement = g_varlist.VarList.norm(location_refinement)
        self.location_variables = g_varlist.VarList.norm(location_variables)
        self.usage_rules = g_varlist.VarList.norm(usage_rules)

    @classmethod
    def fromInfo(cls, name, info):
        info = _reqSchema(reqProfDef, name, info)
        return cls(name,
                   location_reference=info.get('location_reference').strip(),
                   pidf_element=g_const.getPidfElement(info.get('pidf_element')),
                   disposition=g_const.getDisposition(info.get('location_disposition')),
                   geolocation_routing=_normBool('geolocation_routing', info.get('geolocation_routing')),
                   send_location=_normBool('send_location', info.get('send_location')),
                   location_refinement=_normVarList(name, 'location_refinement', info.get('location_refinement')),
                   location_variables=_normVarList(name, 'location_variables', info.get('location_variables')),
                   usage_rules=_normVarList(name, 'usage_rules', info.get('usage_rules')))

    def pack(self):
        return {
            'name': self.name,
            'location_reference': self.location_reference,
            'pidf_element': g_const.pidfnames[self.pidf_element],
            'location_disposition': g_const.dispnames[self.disposition],
            'geolocation_routing': self.geolocation_routing,
            'send_location': self.send_location,
            'location_refinement': self.location_refinement.join(),
            'location_variables': self.location_variables.join(),
            'usage_rules': self.usage_rules.join(),
        }

def validateLocation(loc):
    '''
    Validate a location record's variables against its format.

    Raises:
        BadLocation: If the location is not valid.
    '''
    if loc.format == g_const.Format.NONE:
        raise g_exc.BadLocation(mesg=f'Location {loc.name!r} must have a format', name=loc.name)

    if loc.format == g_const.Format.CIVIC_ADDRESS:
        try:
            g_civicaddr.validate(loc.location_vars)
        except g_exc.BadVarName as e:
            mesg = f'Location {loc.name!r} has invalid item {e.get("name")!r} in the location'
            raise g_exc.BadLocation(mesg=mesg, name=loc.name, item=e.get('name'), err=e.errname) from None
        return

    if loc.format == g_const.Format.GML:
        try:
            g_gml.validate(loc.location_vars)
        except g_exc.GeoErr as e:
            mesg = f'Location {loc.name!r} is not a valid GML shape: {e.get("mesg")}'
            raise g_exc.BadLocation(mesg=mesg, name=loc.name, item=e.get('name'), err=e.errname) from None
        return

    if loc.format == g_const.Format.URI:
        if loc.location_vars.get('URI') is None:
            mesg = f'Location {loc.name!r} format is URI but no "URI" was found in location {loc.location_vars.join()!r}'
            raise g_exc.BadLocation(mesg=mesg, name=loc.name)

def validateProfile(prof, getloc):
    '''
    Validate a profile record against the locations available to it.

    Args:
        prof (Profile): The profile to validate.
        getloc (callable): A function which returns a Location by name or None.

    Raises:
        BadProfile: If the profile is not valid.
        NoSuchLocation: If the profile references a location which does not exist.
    '''
    if not prof.location_reference:
        if prof.location_refinement or prof.location_variables:
            mesg = f"Profile {prof.name!r} can't have location_refinement or location_variables without a location_reference"
            raise g_exc.BadProfile(mesg=mesg, name=prof.name)
        return

    loc = getloc(prof.location_reference)
    if loc is None:
        mesg = f'Profile {prof.name!r} has a location_reference {prof.location_reference!r} that does not exist'
        raise g_exc.NoSuchLocation(mesg=mesg, name=prof.name, location=prof.location_reference)

    if prof.location_refinement and loc.format == g_const.Format.CIVIC_ADDRESS:
        try:
            g_civicaddr.validate(prof.location_refinement)
        except g_exc.BadVarName as e:
            mesg = f'Profile {prof.name!r} has invalid item {e.get("name")!r} in the location_refinement'
            raise g_exc.BadProfile(mesg=mesg, name=prof.name, item=e.get('name')) from None

class Registry:
    '''
    A thread safe registry of Location and Profile records.

    Records are never modified once they are added.  A load or reload builds
    a complete new set of records and swaps them in at once.
    '''
    def __init__(self):
        self._lock = threading.Lock()
        self.path = None
        self.locations = {}
        self.profiles = {}

    def getLocation(self, name):
        with self._lock:
            return self.locations.get(name)

    def getProfile(self, name):
        with self._lock:
            return self.profiles.get(name)

    def getLocations(self):
        '''
        Get the location records sorted by name.
        '''
        with self._lock:
            locs = list(self.locations.values())
        return sorted(locs, key=lambda x: x.name)

    def getProfiles(self):
        '''
        Get the profile records sorted by name.
        '''
        with self._lock:
            profs = list(self.profiles.values())
        return sorted(profs, key=lambda x: x.name)

    def addLocation(self, name, info):
        '''
        Validate and add ( or replace ) a location record.

        Returns:
            Location: The new record.
        '''
        loc = Location.fromInfo(name, info)
        validateLocation(loc)
        with self._lock:
            self.locations[name] = loc
        return loc

    def addProfile(self, name, info):
        '''
        Validate and add ( or replace ) a profile record.

        Returns:
            Profile: The new record.
        '''
        prof = Profile.fromInfo(name, info)
        validateProfile(prof, self.getLocation)
        with self._lock:
            self.profiles[name] = prof
        return prof

    def load(self, conf):
        '''
        Replace all records with the ones defined in conf.

        Args:
            conf (dict): A mapping of object name to object definition.

        Notes:
            Locations are loaded before profiles so profiles may reference any
            location.  Invalid records are logged and skipped.

        Returns:
            (int, int): The number of locations and profiles loaded.
        '''
        if conf is None:
            conf = {}

        if not isinstance(conf, dict):
            raise g_exc.BadConfValu(mesg='Geolocation configuration must be a mapping of name to definition')

        locs = {}
        profs = {}

        locinfos = []
        profinfos = []

        for name, info in conf.items():

            name = str(name)
            if not isinstance(info, dict):
                logger.error('Geolocation object %r definition must be a mapping', name)
                continue

            otyp = info.get('type')
            if otyp == 'location':
                locinfos.append((name, info))
            elif otyp == 'profile':
                profinfos.append((name, info))
            else:
                logger.error('Geolocation object %r has an unknown type %r', name, otyp)

        for name, info in locinfos:
            try:
                loc = Location.fromInfo(name, info)
                validateLocation(loc)
            except g_exc.GeoErr as e:
                logger.error('Rejected location %r: %s', name, e.get('mesg'))
                continue
            locs[name] = loc

        for name, info in profinfos:
            try:
                prof = Profile.fromInfo(name, info)
                validateProfile(prof, locs.get)
            except g_exc.GeoErr as e:
                logger.error('Rejected profile %r: %s', name, e.get('mesg'))
                continue
            profs[name] = prof

        with self._lock:
            self.locations = locs
            self.profiles = profs

        logger.info('Loaded %d geolocation locations and %d profiles', len(locs), len(profs))
        return len(locs), len(profs)

    def loadFile(self, path):
        '''
        Load records from a YAML file and remember the path for reload().
        '''
        path = g_common.reqpath(path)
        try:
            conf = g_common.yamlload(path)
        except yaml.YAMLError as e:
            raise g_exc.BadConfValu(mesg=f'Unable to parse geolocation config {path}: {e}', path=path) from None

        retn = self.load(conf)
        self.path = path
        return retn

    def reload(self):
        '''
        Reload the records from the last loaded file.
        '''
        if self.path is None:
            raise g_exc.BadArg(mesg='The registry has not been loaded from a file')
        return self.loadFile(self.path)
