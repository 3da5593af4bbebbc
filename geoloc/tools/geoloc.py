import sys
import logging
import argparse

import regex

import xml.etree.ElementTree as xml_et

import geoloc.exc as g_exc
import geoloc.common as g_common

import geoloc.lib.gml as g_gml
import geoloc.lib.const as g_const
import geoloc.lib.config as g_config
import geoloc.lib.output as g_output
import geoloc.lib.eprofile as g_eprofile
import geoloc.lib.registry as g_registry
import geoloc.lib.civicaddr as g_civicaddr

logger = logging.getLogger(__name__)

descr = '''
List and show the geolocation locations and profiles defined in a YAML
configuration file, the civicAddress code mappings and the GML shapes.
'''

confdefs = {
    'default:language': {'type': 'string', 'default': g_civicaddr.deflang,
                         'description': 'The language used for civicAddress locations with no "lang" variable.'},
    'log:level': {'type': 'string', 'enum': list(g_const.LOG_LEVEL_CHOICES.keys()),
                  'description': 'The log level to use.'},
    'log:struct': {'type': 'boolean', 'default': False,
                   'description': 'Use structured ( JSON ) logging.'},
}

def _getLike(opts):
    if opts.like is None:
        return None
    try:
        return regex.compile(opts.like)
    except regex.error as e:
        raise g_exc.BadArg(mesg=f'Invalid --like pattern {opts.like!r}: {e}') from None

def _filter(items, like):
    if like is None:
        return items
    return [item for item in items if like.search(item.name)]

def _loadRegistry(opts):
    if opts.conf is None:
        raise g_exc.NeedConfValu(mesg='A geolocation configuration file is required ( --conf )')
    reg = g_registry.Registry()
    reg.loadFile(opts.conf)
    return reg

def _or(text):
    return text if text else '<none>'

def listLocations(opts, conf, outp):

    reg = _loadRegistry(opts)
    locs = _filter(reg.getLocations(), _getLike(opts))

    outp.printf('Geolocation Location Objects:\n')
    outp.printf('<Object ID...................................> <Format.....> <Details.............>')
    outp.printf('=' * 83)

    for loc in locs:
        outp.printf(f'{loc.name[:46]:<46} {g_const.formatnames[loc.format]:<13} {loc.location_vars.join()}')

    outp.printf(f'\nTotal Location Objects: {len(locs)}\n')
    return 0

def listProfiles(opts, conf, outp):

    reg = _loadRegistry(opts)
    profs = _filter(reg.getProfiles(), _getLike(opts))

    outp.printf('Geolocation Profile Objects:\n')
    outp.printf('<Object ID...................................> <Disposition> <Send> <Location Reference> ')
    outp.printf('=' * 89)

    for prof in profs:
        send = 'yes' if prof.send_location else 'no'
        outp.printf(f'{prof.name[:46]:<46} {g_const.dispnames[prof.disposition]:<13} {send:<6} {prof.location_reference}')

    outp.printf(f'\nTotal Profile Objects: {len(profs)}\n')
    return 0

def showProfiles(opts, conf, outp):

    reg = _loadRegistry(opts)
    profs = _filter(reg.getProfiles(), _getLike(opts))

    lang = conf.get('default:language')

    outp.printf('Geolocation Profile Objects:\n')

    count = 0
    for prof in profs:

        try:
            eprof = g_eprofile.fromProfile(prof, reg)
        except g_exc.GeoErr as e:
            outp.printf(f'Unable to resolve profile {prof.name}: {e.get("mesg")}\n')
            continue

        info = eprof.pack()

        locdetails = None
        efct = None
        if eprof.location_reference:
            locdetails = info.get('location_vars')
            efct = info.get('effective_location')

        outp.printf(f'id:                            {info.get("id")}')
        outp.printf(f'received_location_disposition: {info.get("location_disposition")}')
        outp.printf(f'send_location:                 {"yes" if info.get("send_location") else "no"}')
        outp.printf(f'pidf_element:                  {info.get("pidf_element")}')
        outp.printf(f'location_reference:            {_or(info.get("location_reference"))}')
        outp.printf(f'location_format:               {info.get("format")}')
        outp.printf(f'location_reference_details:    {_or(locdetails)}')
        outp.printf(f'location_refinement:           {_or(info.get("location_refinement"))}')
        outp.printf(f'location_variables:            {_or(info.get("location_variables"))}')
        outp.printf(f'effective_location:            {_or(efct)}')
        outp.printf(f'usage_rules:                   {_or(info.get("usage_rules"))}')

        if eprof.format == g_const.Format.CIVIC_ADDRESS:
            xml = xml_et.tostring(eprof.getCivicXml(lang=lang), encoding='unicode')
            outp.printf(f'civic_address:                 {xml}')

        outp.printf('')
        count += 1

    outp.printf(f'\nTotal Profile Objects: {count}\n')
    return 0

def showMappings(opts, conf, outp):
    outp.printf(f'{"Official Code":<16} {"Synonym":<32}')
    outp.printf(f'{"=" * 16} {"=" * 32}')
    for code, name in g_civicaddr.getMappings():
        outp.printf(f'{code:<16} {name:<32}')
    outp.printf('')
    return 0

def _fmtAttr(name, minc, maxc):
    if maxc == g_gml.unbounded:
        return f'{name}({minc},unl)'
    return f'{name}({minc},{maxc})'

def showShapes(opts, conf, outp):
    outp.printf(f'{"Shape":<16} {"Attributes name(min,max)":<32}')
    outp.printf(f'{"=" * 16} {"=" * 31}')
    for shape, attrs in g_gml.getShapeDefs():
        attrtext = ' '.join([_fmtAttr(name, minc, maxc) for (name, minc, maxc, func) in attrs])
        outp.printf(f'{shape:<16} {attrtext}')
    outp.printf('')
    return 0

cmds = {
    'list-locations': listLocations,
    'list-profiles': listProfiles,
    'show-profiles': showProfiles,
    'show-mappings': showMappings,
    'show-shapes': showShapes,
}

def getConf():
    return g_config.Config(confdefs, prefix='geoloc')

def getArgParser(conf):
    pars = argparse.ArgumentParser(prog='geoloc', description=descr)
    pars.add_argument('--conf', default=None, help='The YAML file of geolocation location and profile definitions.')

    for name, kwargs in conf.getArgParseArgs():
        pars.add_argument(name, **kwargs)

    subpars = pars.add_subparsers(required=True,
                                  title='subcommands',
                                  dest='cmd',)

    for name, helptext in (('list-locations', 'List the location objects.'),
                           ('list-profiles', 'List the profile objects.'),
                           ('show-profiles', 'Show the profile objects resolved as effective profiles.')):
        subp = subpars.add_parser(name, help=helptext)
        subp.add_argument('--like', default=None, help='Only include objects whose name matches the regular expression.')

    subpars.add_parser('show-mappings', help='Show the civicAddress official codes and their synonyms.')
    subpars.add_parser('show-shapes', help='Show the GML shapes and their attributes.')

    return pars

def main(argv, outp=g_output.stdout):

    conf = getConf()

    pars = getArgParser(conf)
    opts = pars.parse_args(argv)

    try:
        conf.setConfFromOpts(opts)
        conf.setConfFromEnvs()
        conf.reqConfValid()
    except g_exc.BadConfValu as e:
        outp.printf(f'ERROR: {e.get("mesg")}')
        return 1

    g_common.setlogging(logger, defval=conf.get('log:level'), structlog=conf.get('log:struct'))

    try:
        return cmds[opts.cmd](opts, conf, outp)
    except g_exc.GeoErr as e:
        outp.printf(f'ERROR: {e.get("mesg")}')
        return 1

def _main():  # pragma: no cover
    sys.exit(main(sys.argv[1:]))

if __name__ == '__main__':  # pragma: no cover
    _main()
