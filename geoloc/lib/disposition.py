'''
Combine the locations signaled with a call with the configured profile.

The configured profile's location_disposition decides what is kept:

    discard
        Only the configured profile is used and the signaled locations are ignored.
    append
        The signaled locations are used followed by the configured profile.
    prepend
        The configured profile is used followed by the signaled locations.
    replace
        Only the signaled locations are used.
'''
import logging

import geoloc.exc as g_exc

import geoloc.lib.pidf as g_pidf
import geoloc.lib.const as g_const
import geoloc.lib.eprofile as g_eprofile
import geoloc.lib.datastore as g_datastore

logger = logging.getLogger(__name__)

def splitHeader(text):
    '''
    Split a Geolocation header value into its location values.

    Commas inside ``<...>`` do not split the value.

    Returns:
        list: The stripped, non empty location values in header order.
    '''
    if not text:
        return []

    retn = []
    part = []
    depth = 0

    for c in text:
        if c == '<':
            depth += 1
        elif c == '>' and depth:
            depth -= 1
        elif c == ',' and not depth:
            retn.append(''.join(part))
            part = []
            continue
        part.append(c)

    retn.append(''.join(part))
    return [p.strip() for p in retn if p.strip()]

class Resolver:
    '''
    Build the list of effective profiles for a call.

    Args:
        registry (Registry): The registry of configured records.
        loader (callable): An optional function which returns the body part
                           ( bytes or str ) for a "cid:" URI or None if there is none.
    '''
    def __init__(self, registry, loader=None):
        self.registry = registry
        self.loader = loader

    def _loadPidf(self, uri, name):

        if self.loader is None:
            raise g_exc.NoPidfBody(mesg=f"{name}: There's no message body in which to search for {uri!r}", uri=uri)

        body = self.loader(uri)
        if not body:
            raise g_exc.NoPidfBody(mesg=f'{name}: No pidf document with content id {uri!r} was found', uri=uri)

        root = g_pidf.parse(body)
        return g_eprofile.fromPidf(root, ref=name)

    def getUriProfile(self, value, profile, name=None):
        '''
        Build the effective profile for one location value of a Geolocation header.

        Args:
            value (str): The location value such as ``<cid:abc@example.com>``.
            profile (Profile): The configured profile whose disposition and send_location are applied.
            name (str): The call name used in log messages.

        Raises:
            BadUri: If the value is not enclosed in angle brackets.
        '''
        value = value.strip()
        if len(value) < 2 or value[0] != '<' or value[-1] != '>':
            raise g_exc.BadUri(mesg=f'{name}: Geolocation header has bad URI {value!r}', uri=value)

        uri = value[1:-1]

        if uri.startswith('cid:'):
            logger.debug('%s: Processing URI %r.  PIDF', name, uri)
            eprof = self._loadPidf(uri, name)
        else:
            logger.debug('%s: Processing URI %r.  Reference', name, uri)
            eprof = g_eprofile.fromUri(uri)

        eprof.setDisposition(profile.disposition, profile.send_location)
        return eprof

    def _addConfigured(self, ds, profile, name):
        try:
            eprof = g_eprofile.fromProfile(profile, self.registry)
        except g_exc.GeoErr as e:
            logger.warning('%s: Unable to create effective profile from profile %r: %s',
                           name, profile.name, e.get('mesg'))
            return
        ds.add(eprof)

    def _addSignaled(self, ds, profile, values, name):
        for value in values:
            try:
                eprof = self.getUriProfile(value, profile, name=name)
            except g_exc.GeoErr as e:
                logger.warning('%s: Unable to create effective profile for URI %r.  Skipping: %s',
                               name, value, e.get('mesg'))
                continue
            ds.add(eprof)

    def resolve(self, profile, header=None, name=None):
        '''
        Combine a configured profile with a signaled Geolocation header.

        Args:
            profile (Profile): The configured profile.
            header (str): The Geolocation header value or None if there was none.
            name (str): The call name used in log messages and as the Datastore name.

        Returns:
            Datastore: The effective profiles, which may be empty.
        '''
        ds = g_datastore.Datastore(name=name)

        disp = profile.disposition
        values = splitHeader(header)

        if disp == g_const.Disposition.DISCARD:
            if values:
                logger.debug('%s: Profile %r location_disposition is discard so discarding Geolocation: %s',
                             name, profile.name, header)
            self._addConfigured(ds, profile, name)

        elif disp == g_const.Disposition.PREPEND:
            self._addConfigured(ds, profile, name)
            self._addSignaled(ds, profile, values, name)

        elif disp == g_const.Disposition.APPEND:
            self._addSignaled(ds, profile, values, name)
            self._addConfigured(ds, profile, name)

        elif disp == g_const.Disposition.REPLACE:
            if not values:
                logger.warning("%s: Profile %r location_disposition is replace but there's no "
                               "Geolocation header and therefore no location info to replace it with",
                               name, profile.name)
            self._addSignaled(ds, profile, values, name)

        if ds.size() == 0:
            logger.info('%s: No usable location.  Unable to add any effective profiles', name)

        return ds

    def resolveByName(self, profname, header=None, name=None):
        '''
        Combine a configured profile, looked up by name, with a signaled Geolocation header.
        '''
        if not profname:
            if header:
                logger.info('%s: Message has Geolocation header %r but there is no profile. '
                            'Geolocation info discarded.', name, header)
            return g_datastore.Datastore(name=name)

        profile = self.registry.getProfile(profname)
        if profile is None:
            logger.info("%s: Profile %r doesn't exist.  Geolocation info discarded.", name, profname)
            return g_datastore.Datastore(name=name)

        return self.resolve(profile, header=header, name=name)
