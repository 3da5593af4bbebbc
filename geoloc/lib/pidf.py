'''
PIDF-LO parsing and the transform of a PIDF-LO document into the normalized
intermediate document used to construct an effective profile.

The intermediate document looks like this::

    <presence entity="pres:alice@example.com">
        <pidf-element name="device" id="element-id">
            <location-info format="gml">format="gml",type="Circle",crs="2d",pos="-34.4 150.8",radius="30"</location-info>
            <usage-rules>retransmission-allowed="no",retention-expiry="2010-11-14T20:00:00Z"</usage-rules>
            <method>GPS</method>
        </pidf-element>
    </presence>

The location-info and usage-rules text may be parsed directly with VarList.parse().
'''
import logging

import xml.etree.ElementTree as xml_et

import geoloc.exc as g_exc

import geoloc.lib.varlist as g_varlist

logger = logging.getLogger(__name__)

NS_PIDF = 'urn:ietf:params:xml:ns:pidf'
NS_DM = 'urn:ietf:params:xml:ns:pidf:data-model'
NS_GP = 'urn:ietf:params:xml:ns:pidf:geopriv10'
NS_CA = 'urn:ietf:params:xml:ns:pidf:geopriv10:civicAddr'
NS_GML = 'http://www.opengis.net/gml'
NS_GS = 'http://www.opengis.net/pidflo/1.0'

# RFC 5491 Rule 8: the first <device> containing a location has priority,
# then the first <tuple>, and a <person> is only used as a last resort.
priority = ('device', 'tuple', 'person')

kindns = {
    'device': NS_DM,
    'tuple': NS_PIDF,
    'person': NS_DM,
}

crsnames = {
    'urn:ogc:def:crs:EPSG::4326': '2d',
    'urn:ogc:def:crs:EPSG::4979': '3d',
}

anglenames = {
    'urn:ogc:def:uom:EPSG::9101': 'radians',
    'urn:ogc:def:uom:EPSG::9102': 'degrees',
}

def _tag(ns, name):
    return f'{{{ns}}}{name}'

def _split(tag):
    if tag.startswith('{'):
        ns, name = tag[1:].split('}', 1)
        return ns, name
    return None, tag

def _text(elem):
    if elem is None or elem.text is None:
        return ''
    return elem.text.strip()

def parse(byts):
    '''
    Parse a PIDF-LO document.

    Args:
        byts (bytes|str): The XML document.

    Returns:
        xml.etree.ElementTree.Element: The presence element.
    '''
    if isinstance(byts, str):
        byts = byts.encode('utf8')

    try:
        root = xml_et.fromstring(byts)
    except xml_et.ParseError as e:
        raise g_exc.BadPidfDoc(mesg=f'Unable to parse PIDF-LO document: {e}') from None

    if root.tag != _tag(NS_PIDF, 'presence'):
        raise g_exc.BadPidfDoc(mesg=f'PIDF-LO document root is not a presence element: {root.tag}')

    return root

def getLocationFormat(info):
    '''
    Get the format name of the first location in a location-info element.
    '''
    for chld in info:
        ns, name = _split(chld.tag)
        if ns == NS_CA and name == 'civicAddress':
            return 'civicAddress'
        if ns in (NS_GML, NS_GS):
            return 'gml'
        return name
    return None

def _getGeoPriv(elem, fmt=None):
    for geop in elem.iter(_tag(NS_GP, 'geopriv')):
        info = geop.find(_tag(NS_GP, 'location-info'))
        if info is None:
            continue
        if fmt is not None and getLocationFormat(info) != fmt:
            continue
        return geop, info
    return None, None

def getElement(root, kind, fmt=None):
    '''
    Get the first element of the given kind which contains a location.

    Args:
        root (Element): The presence element.
        kind (str): One of "device", "tuple" or "person".
        fmt (str): Optionally require a location of the given format.

    Returns:
        Element: The element or None.
    '''
    ns = kindns.get(kind)
    if ns is None:
        raise g_exc.BadArg(mesg=f'Invalid PIDF element kind {kind!r}', kind=kind)

    for elem in root.findall(_tag(ns, kind)):
        geop, info = _getGeoPriv(elem, fmt=fmt)
        if info is not None:
            return elem

    return None

def _civicVars(addr, vlist):
    for chld in addr:
        ns, name = _split(chld.tag)
        vlist.append(name, _text(chld))

def _gmlVars(shape, vlist):

    crs = crsnames.get(shape.get('srsName'), '2d')
    vlist.append('crs', crs)

    posname = 'pos'
    width = 2
    if crs == '3d':
        posname = 'pos3d'
        width = 3

    for chld in shape.iter():

        if chld is shape:
            continue

        ns, name = _split(chld.tag)
        text = _text(chld)

        if name == 'pos':
            vlist.append(posname, ' '.join(text.split()))
            continue

        if name == 'posList':
            vals = text.split()
            for i in range(0, len(vals) - width + 1, width):
                vlist.append(posname, ' '.join(vals[i:i + width]))
            continue

        if len(chld) or not text:
            continue

        vlist.append(name, text)

        angle = anglenames.get(chld.get('uom'))
        if angle is not None:
            vlist.append(f'{name}_uom', angle)

def getLocationVars(info):
    '''
    Get the variables of the first location in a location-info element.

    Returns:
        (str, VarList): The format name and the location variables.
    '''
    vlist = g_varlist.VarList()

    fmt = getLocationFormat(info)
    if fmt is None:
        return None, vlist

    vlist.append('format', fmt)

    locn = info[0]
    if fmt == 'civicAddress':
        _civicVars(locn, vlist)
    elif fmt == 'gml':
        ns, name = _split(locn.tag)
        vlist.append('type', name)
        _gmlVars(locn, vlist)

    return fmt, vlist

def getUsageVars(geop):
    vlist = g_varlist.VarList()

    usage = geop.find(_tag(NS_GP, 'usage-rules'))
    if usage is None:
        return vlist

    for chld in usage:
        ns, name = _split(chld.tag)
        vlist.append(name, _text(chld))

    return vlist

def transform(root, kind, fmt=None):
    '''
    Transform the first element of the given kind which contains a location.

    Args:
        root (Element): The presence element.
        kind (str): One of "device", "tuple" or "person".
        fmt (str): Optionally require a location of the given format.

    Returns:
        Element: The intermediate presence element or None if there is no such element.
    '''
    elem = getElement(root, kind, fmt=fmt)
    if elem is None:
        return None

    geop, info = _getGeoPriv(elem, fmt=fmt)

    form, locvars = getLocationVars(info)

    retn = xml_et.Element('presence', {'entity': root.get('entity', '')})

    attrs = {'name': kind}
    iden = elem.get('id')
    if iden:
        attrs['id'] = iden

    pelem = xml_et.SubElement(retn, 'pidf-element', attrs)

    locinfo = xml_et.SubElement(pelem, 'location-info', {'format': form or ''})
    locinfo.text = locvars.join()

    usage = xml_et.SubElement(pelem, 'usage-rules')
    usage.text = getUsageVars(geop).join()

    meth = xml_et.SubElement(pelem, 'method')
    meth.text = _text(geop.find(_tag(NS_GP, 'method')))

    return retn

def search(root):
    '''
    Transform the highest priority location bearing element of a PIDF-LO document.

    Returns:
        Element: The intermediate presence element or None if no element has a location.
    '''
    for kind in priority:
        retn = transform(root, kind)
        if retn is not None:
            logger.debug('Using PIDF-LO %s element for location', kind)
            return retn
    return None
