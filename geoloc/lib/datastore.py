'''
The ordered list of effective profiles attached to a call.
'''
import logging
import threading

import geoloc.exc as g_exc

import geoloc.lib.eprofile as g_eprofile

logger = logging.getLogger(__name__)

class Datastore:
    '''
    An append only list of EffectiveProfile instances.

    Args:
        name (str): The name of the call ( or session ) the list belongs to.
    '''
    def __init__(self, name=None):
        self.name = name
        self._lock = threading.Lock()
        self._eprofs = []

    @classmethod
    def fromProfileName(cls, registry, profname, name=None):
        '''
        Create a Datastore holding the effective profile of a configured profile.

        Raises:
            NoSuchProfile: If there is no profile with the given name.
            NoSuchLocation: If the profile references a location which does not exist.
        '''
        if not profname:
            raise g_exc.BadArg(mesg='A profile name is required')

        prof = registry.getProfile(profname)
        if prof is None:
            logger.error('A profile with the name %r was not found', profname)
            raise g_exc.NoSuchProfile(mesg=f'A profile with the name {profname!r} was not found', name=profname)

        ds = cls(name=name)
        ds.add(g_eprofile.fromProfile(prof, registry))
        return ds

    def size(self):
        with self._lock:
            return len(self._eprofs)

    def get(self, indx):
        '''
        Get the effective profile at the given index or None if out of range.
        '''
        with self._lock:
            if indx < 0 or indx >= len(self._eprofs):
                return None
            return self._eprofs[indx]

    def add(self, eprof):
        '''
        Append an effective profile.

        Returns:
            int: The new size of the list.
        '''
        if not isinstance(eprof, g_eprofile.EffectiveProfile):
            raise g_exc.BadArg(mesg=f'Datastore entries must be effective profiles, not {type(eprof).__name__}')

        with self._lock:
            self._eprofs.append(eprof)
            return len(self._eprofs)

    def pack(self):
        return [eprof.pack() for eprof in self]

    def __iter__(self):
        with self._lock:
            eprofs = list(self._eprofs)
        return iter(eprofs)

    def __len__(self):
        return self.size()
