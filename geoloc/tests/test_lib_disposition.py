import geoloc.exc as g_exc

import geoloc.lib.const as g_const
import geoloc.lib.disposition as g_disposition

import geoloc.tests.utils as g_t_utils

class DispositionTest(g_t_utils.GeoTest):

    def getTestResolver(self):
        reg = self.getTestRegistry()
        bodies = {
            'cid:loc1@example.com': self.getTestFileBytes('pidf_lo_test.xml'),
            'cid:loc2@example.com': self.getTestFileBytes('pidf_lo_shapes.xml').decode(),
            'cid:empty@example.com': self.getTestFileBytes('pidf_lo_nolocation.xml'),
            'cid:bad@example.com': b'<presence><unclosed></presence>',
        }
        return g_disposition.Resolver(reg, loader=bodies.get)

    def test_disposition_split(self):

        self.eq(g_disposition.splitHeader('<cid:loc1@example.com>, <http://example.com/loc>'),
                ('<cid:loc1@example.com>', '<http://example.com/loc>'))

        # commas inside brackets do not split
        self.eq(g_disposition.splitHeader('<http://example.com/loc?a=1,b=2>,<sip:alice@example.com>'),
                ('<http://example.com/loc?a=1,b=2>', '<sip:alice@example.com>'))

        self.eq(g_disposition.splitHeader('  <http://example.com/loc>  '), ('<http://example.com/loc>',))
        self.eq(g_disposition.splitHeader(' , ,'), ())
        self.eq(g_disposition.splitHeader(''), ())
        self.eq(g_disposition.splitHeader(None), ())

    def test_disposition_discard(self):

        rslv = self.getTestResolver()
        prof = rslv.registry.getProfile('office-discard')

        with self.getLoggerStream('geoloc.lib.disposition') as stream:
            ds = rslv.resolve(prof, header='<cid:loc1@example.com>', name='call-1')

        self.eq(ds.name, 'call-1')
        self.eq([e.id for e in ds], ('office-discard',))

        stream.seek(0)
        self.isin("Profile 'office-discard' location_disposition is discard", stream.read())

        ds = rslv.resolve(prof)
        self.eq([e.id for e in ds], ('office-discard',))

    def test_disposition_prepend(self):

        rslv = self.getTestResolver()
        prof = rslv.registry.getProfile('office-caller')

        ds = rslv.resolve(prof, header='<cid:loc1@example.com>, <http://example.com/loc>', name='call-1')
        self.eq([e.id for e in ds], ('office-caller', 'arcband-2d', 'http://example.com/loc'))

        eprof = ds.get(1)
        self.eq(eprof.format, g_const.Format.GML)
        self.eq(eprof.disposition, g_const.Disposition.PREPEND)
        self.true(eprof.send_location)
        self.eq(eprof.location_vars.get('type'), 'ArcBand')

        eprof = ds.get(2)
        self.eq(eprof.format, g_const.Format.URI)
        self.eq(eprof.disposition, g_const.Disposition.PREPEND)
        self.true(eprof.send_location)

        ds = rslv.resolve(prof, name='call-1')
        self.eq([e.id for e in ds], ('office-caller',))

    def test_disposition_append(self):

        rslv = self.getTestResolver()
        prof = rslv.registry.getProfile('point-append')

        ds = rslv.resolve(prof, header='<cid:loc2@example.com>,<http://example.com/loc>', name='call-1')
        self.eq([e.id for e in ds], ('polygon-2d', 'http://example.com/loc', 'point-append'))

        eprof = ds.get(0)
        self.eq(eprof.disposition, g_const.Disposition.APPEND)
        self.false(eprof.send_location)

        eprof = ds.get(2)
        self.eq(eprof.pidf_element, g_const.PidfElement.TUPLE)
        self.eq(eprof.getEffectiveLocation().get('pos'), '-34.410649 150.87651')

        # no header leaves the configured profile
        ds = rslv.resolve(prof, name='call-1')
        self.eq([e.id for e in ds], ('point-append',))

    def test_disposition_replace(self):

        rslv = self.getTestResolver()
        prof = rslv.registry.getProfile('held-replace')

        ds = rslv.resolve(prof, header='<http://example.com/loc>', name='call-1')
        self.eq([e.id for e in ds], ('http://example.com/loc',))
        self.eq(ds.get(0).disposition, g_const.Disposition.REPLACE)
        self.false(ds.get(0).send_location)

        with self.getLoggerStream('geoloc.lib.disposition') as stream:
            ds = rslv.resolve(prof, name='call-1')

        self.eq(ds.size(), 0)

        stream.seek(0)
        mesgs = stream.read()
        self.isin("location_disposition is replace but there's no Geolocation header", mesgs)
        self.isin('call-1: No usable location', mesgs)

    def test_disposition_skipped(self):

        rslv = self.getTestResolver()
        prof = rslv.registry.getProfile('passthru')

        header = ', '.join((
            'http://example.com/nobrackets',
            '<cid:bad@example.com>',
            '<cid:empty@example.com>',
            '<cid:newp@example.com>',
            '<>',
            '<cid:loc1@example.com>',
        ))

        with self.getLoggerStream('geoloc.lib.disposition') as stream:
            ds = rslv.resolve(prof, header=header, name='call-1')

        self.eq([e.id for e in ds], ('arcband-2d',))

        stream.seek(0)
        mesgs = stream.read()
        self.isin("Unable to create effective profile for URI 'http://example.com/nobrackets'", mesgs)
        self.isin("Unable to create effective profile for URI '<cid:bad@example.com>'", mesgs)
        self.isin("Unable to create effective profile for URI '<cid:empty@example.com>'", mesgs)
        self.isin("Unable to create effective profile for URI '<cid:newp@example.com>'", mesgs)
        self.isin("Unable to create effective profile for URI '<>'", mesgs)

        # without a body loader a cid URI can not be resolved
        rslv = g_disposition.Resolver(rslv.registry)
        ds = rslv.resolve(prof, header='<cid:loc1@example.com>', name='call-1')
        self.eq(ds.size(), 0)

    def test_disposition_uri_profile(self):

        rslv = self.getTestResolver()
        prof = rslv.registry.getProfile('office-caller')

        eprof = rslv.getUriProfile(' <sip:alice@example.com> ', prof)
        self.eq(eprof.location_vars.get('URI'), 'sip:alice@example.com')
        self.eq(eprof.disposition, g_const.Disposition.PREPEND)

        with self.raises(g_exc.BadUri):
            rslv.getUriProfile('sip:alice@example.com', prof)

        with self.raises(g_exc.BadPidfDoc):
            rslv.getUriProfile('<cid:bad@example.com>', prof)

        with self.raises(g_exc.NoPidfLocation):
            rslv.getUriProfile('<cid:empty@example.com>', prof)

        with self.raises(g_exc.NoPidfBody):
            rslv.getUriProfile('<cid:newp@example.com>', prof)

    def test_disposition_by_name(self):

        rslv = self.getTestResolver()

        ds = rslv.resolveByName('office-caller', header='<http://example.com/loc>', name='call-1')
        self.eq([e.id for e in ds], ('office-caller', 'http://example.com/loc'))

        with self.getLoggerStream('geoloc.lib.disposition') as stream:
            ds = rslv.resolveByName('newp', header='<http://example.com/loc>', name='call-1')
            self.eq(ds.size(), 0)

            ds = rslv.resolveByName(None, header='<http://example.com/loc>', name='call-1')
            self.eq(ds.size(), 0)

        stream.seek(0)
        mesgs = stream.read()
        self.isin("call-1: Profile 'newp' doesn't exist", mesgs)
        self.isin('but there is no profile', mesgs)
