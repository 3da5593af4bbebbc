'''
Effective profiles: the resolved location information attached to a call.

An effective profile is built from a configured profile record, a signaled
URI or a signaled PIDF-LO document.  Every list an effective profile holds is
its own copy so it may be passed between threads and outlive the registry
records it was built from.
'''
import logging
import threading

import geoloc.exc as g_exc

import geoloc.lib.pidf as g_pidf
import geoloc.lib.const as g_const
import geoloc.lib.varlist as g_varlist
import geoloc.lib.civicaddr as g_civicaddr

logger = logging.getLogger(__name__)

pidfformats = {
    'gml': g_const.Format.GML,
    'civicAddress': g_const.Format.CIVIC_ADDRESS,
}

class EffectiveProfile:
    '''
    A resolved location profile.

    Args:
        iden (str): The profile name, URI or PIDF-LO element id.
    '''
    def __init__(self, iden):
        self._lock = threading.Lock()

        self.id = iden
        self.location_reference = ''
        self.pidf_element = g_const.PidfElement.DEVICE
        self.disposition = g_const.Disposition.DISCARD
        self.geolocation_routing = False
        self.send_location = False
        self.format = g_const.Format.NONE
        self.method = ''

        self.location_vars = g_varlist.VarList()
        self.location_refinement = g_varlist.VarList()
        self.location_variables = g_varlist.VarList()
        self.effective_location = g_varlist.VarList()
        self.usage_rules = g_varlist.VarList()

    def refresh(self, registry):
        '''
        Re-read the referenced location and recompute the effective location.

        Args:
            registry (Registry): The registry to look up the location_reference in.

        Notes:
            The effective location is a copy of the location variables with each
            refinement variable applied in order.  Readers never see a partially
            refreshed profile.

        Raises:
            NoSuchLocation: If the location_reference does not exist.
        '''
        with self._lock:
            ref = self.location_reference
            form = self.format
            locvars = self.location_vars.copy()
            refinement = self.location_refinement.copy()

        if ref:
            loc = registry.getLocation(ref)
            if loc is None:
                raise g_exc.NoSuchLocation(mesg=f'Profile {self.id!r} referenced location {ref!r} does not exist',
                                           name=self.id, location=ref)
            form = loc.format
            locvars = loc.location_vars.copy()

        efct = locvars.merge(refinement)

        with self._lock:
            self.format = form
            self.location_vars = locvars
            self.effective_location = efct

    def setDisposition(self, disposition, send_location):
        with self._lock:
            self.disposition = disposition
            self.send_location = send_location

    def getEffectiveLocation(self):
        '''
        Get a copy of the effective location variables.
        '''
        with self._lock:
            return self.effective_location.copy()

    def getCivicXml(self, lang=None):
        '''
        Render the effective location of a civicAddress profile as XML.

        Returns:
            xml.etree.ElementTree.Element: The civicAddress element.
        '''
        with self._lock:
            if self.format != g_const.Format.CIVIC_ADDRESS:
                raise g_exc.BadArg(mesg=f'Profile {self.id!r} is not a civicAddress profile', name=self.id)
            efct = self.effective_location.copy()
        return g_civicaddr.toXml(efct, lang=lang)

    def pack(self):
        '''
        Get a dictionary snapshot of the profile.
        '''
        with self._lock:
            return {
                'id': self.id,
                'location_reference': self.location_reference,
                'pidf_element': g_const.pidfnames.get(self.pidf_element, '<none>'),
                'location_disposition': g_const.dispnames[self.disposition],
                'geolocation_routing': self.geolocation_routing,
                'send_location': self.send_location,
                'format': g_const.formatnames[self.format],
                'method': self.method,
                'location_vars': self.location_vars.join(),
                'location_refinement': self.location_refinement.join(),
                'location_variables': self.location_variables.join(),
                'effective_location': self.effective_location.join(),
                'usage_rules': self.usage_rules.join(),
            }

    def __repr__(self):
        return f'<EffectiveProfile id={self.id!r} format={g_const.formatnames[self.format]}>'

def fromProfile(profile, registry):
    '''
    Build an effective profile from a configured profile record.

    Args:
        profile (Profile): The profile record.
        registry (Registry): The registry used to resolve the location_reference.

    Raises:
        NoSuchLocation: If the profile references a location which no longer exists.

    Returns:
        EffectiveProfile: The new effective profile.
    '''
    eprof = EffectiveProfile(profile.name)

    eprof.location_reference = profile.location_reference
    eprof.pidf_element = profile.pidf_element
    eprof.disposition = profile.disposition
    eprof.geolocation_routing = profile.geolocation_routing
    eprof.send_location = profile.send_location

    eprof.location_refinement = profile.location_refinement.copy()
    eprof.location_variables = profile.location_variables.copy()
    eprof.usage_rules = profile.usage_rules.copy()

    try:
        eprof.refresh(registry)
    except g_exc.NoSuchLocation:
        logger.error('Profile %r referenced location %r does not exist', profile.name, profile.location_reference)
        raise

    return eprof

def fromUri(uri):
    '''
    Build an effective profile from a location URI.

    Args:
        uri (str): The URI, optionally enclosed in angle brackets.

    Raises:
        BadUri: If the URI is empty.
    '''
    text = (uri or '').strip()
    if text.startswith('<'):
        text = text[1:]
    if text.endswith('>'):
        text = text[:-1]
    text = text.strip()

    if not text:
        raise g_exc.BadUri(mesg=f'Empty location URI {uri!r}', uri=uri)

    eprof = EffectiveProfile(text)
    eprof.format = g_const.Format.URI
    eprof.location_vars = g_varlist.VarList([('URI', text)])
    return eprof

def fromPidfResult(result, ref=None):
    '''
    Build an effective profile from an intermediate document produced by geoloc.lib.pidf.transform().

    Args:
        result (Element): The intermediate presence element.
        ref (str): A reference used in log messages such as the URI the document came from.

    Raises:
        NoPidfLocation: If the document has no pidf-element.
        BadPidfFormat: If the location format is neither gml nor civicAddress.
        BadPidfLocation: If the location has no variables.
    '''
    if ref is None:
        ref = '<pidf>'

    pelem = result.find('pidf-element')
    if pelem is None:
        raise g_exc.NoPidfLocation(mesg=f'{ref}: No PIDF-LO element found', ref=ref)

    info = pelem.find('location-info')

    iden = pelem.get('id') or result.get('entity', '')
    eprof = EffectiveProfile(iden)

    form = None
    if info is not None:
        form = info.get('format')

    fval = pidfformats.get(form)
    if fval is None:
        logger.error('%s: Unknown format %r', ref, form)
        raise g_exc.BadPidfFormat(mesg=f'{ref}: Unknown PIDF-LO location format {form!r}', ref=ref, format=form)

    eprof.format = fval
    eprof.pidf_element = g_const.getPidfElement(pelem.get('name', '')) or g_const.PidfElement.NONE

    text = info.text or ''
    eprof.location_vars = g_varlist.VarList.parse(text)
    if not eprof.location_vars:
        logger.error('%s: Unable to create location variables from %r', ref, text)
        raise g_exc.BadPidfLocation(mesg=f'{ref}: Unable to create location variables from {text!r}', ref=ref)

    eprof.usage_rules = g_varlist.VarList.parse(pelem.findtext('usage-rules'))
    eprof.method = pelem.findtext('method') or ''

    return eprof

def fromPidf(root, ref=None):
    '''
    Build an effective profile from a parsed PIDF-LO document.

    Args:
        root (Element): The presence element returned by geoloc.lib.pidf.parse().
        ref (str): A reference used in log messages.

    Notes:
        The first device containing a location is used, then the first tuple,
        then the first person.

    Raises:
        NoPidfLocation: If no element contains a location.
    '''
    result = g_pidf.search(root)
    if result is None:
        raise g_exc.NoPidfLocation(mesg=f'{ref or "<pidf>"}: No device, tuple or person contains a location',
                                   ref=ref)
    return fromPidfResult(result, ref=ref)
