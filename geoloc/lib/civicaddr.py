'''
civicAddress code / synonym resolution and validation.
'''
import bisect
import logging

import xml.etree.ElementTree as xml_et

import geoloc.exc as g_exc

import geoloc.lookup.civicaddr as g_l_civicaddr

logger = logging.getLogger(__name__)

deflang = 'en_US'

# sorted views of the table, built once and never modified.
# python sorts are stable so duplicate codes keep their table order.
_bycode = tuple(sorted(g_l_civicaddr.getAddrFields(), key=lambda x: x[0]))
_byname = tuple(sorted(g_l_civicaddr.getAddrFields(), key=lambda x: x[1]))

_codekeys = tuple(x[0] for x in _bycode)
_namekeys = tuple(x[1] for x in _byname)

def _find(keys, entries, key, indx):
    i = bisect.bisect_left(keys, key)
    if i < len(keys) and keys[i] == key:
        return entries[i][indx]
    return None

def getMappings():
    '''
    Get the (code, name) mappings in table order.
    '''
    return g_l_civicaddr.getAddrFields()

def getNameFromCode(code):
    '''
    Get the synonym for an official civicAddress code.

    Args:
        code (str): The official code such as ``A1``.

    Notes:
        A code with more than one synonym returns the first one in the table.

    Returns:
        str: The synonym or None if the code is not known.
    '''
    return _find(_codekeys, _bycode, code, 1)

def getCodeFromName(name):
    '''
    Get the official civicAddress code for a synonym.

    Args:
        name (str): The synonym such as ``state_province``.

    Notes:
        A name which is not a known synonym is returned unchanged on the
        assumption that it is already an official code.

    Returns:
        str: The official code.
    '''
    code = _find(_namekeys, _byname, name, 0)
    if code is None:
        return name
    return code

def resolve(token):
    '''
    Resolve a synonym or an official code to an official code.

    Returns:
        str: The official code or None if the token is neither.
    '''
    code = _find(_namekeys, _byname, token, 0)
    if code is not None:
        return code

    if getNameFromCode(token) is not None:
        return token

    return None

def validate(vlist):
    '''
    Validate that every variable name is a civicAddress code or synonym.

    The "lang" variable selects the language of the address and is always allowed.

    Args:
        vlist (VarList): The variables to check.

    Raises:
        BadVarName: For the first variable name which does not resolve.
    '''
    for name, valu in vlist:
        if name == 'lang':
            continue
        if resolve(name) is None:
            raise g_exc.BadVarName(mesg=f'Invalid civicAddress variable name {name!r}', name=name)

def toXml(vlist, lang=None):
    '''
    Render a civicAddress location as a civicAddress XML element.

    Args:
        vlist (VarList): The resolved location variables.
        lang (str): The language to use when the location has no "lang" variable.

    Returns:
        xml.etree.ElementTree.Element: The civicAddress element.
    '''
    locl = vlist.get('lang')
    if not locl:
        if lang is None:
            lang = deflang
        locl = lang.replace('_', '-')

    elem = xml_et.Element('civicAddress', {'lang': locl})

    for name, valu in vlist:
        if name == 'lang':
            continue
        chld = xml_et.SubElement(elem, getCodeFromName(name))
        chld.text = valu

    return elem
