'''
GML shape definitions and validation of GML location variable lists.
'''
import logging

import regex

import geoloc.exc as g_exc

logger = logging.getLogger(__name__)

floatre = regex.compile(r'\s*[-+]?(?:0x(?:[0-9a-f]+(?:\.[0-9a-f]*)?|\.[0-9a-f]+)(?:p[-+]?\d+)?'
                        r'|(?:\d+(?:\.\d*)?|\.\d+)(?:e[-+]?\d+)?|inf(?:inity)?|nan)', regex.IGNORECASE)

def _scanFloats(text, count):
    # leading floats must parse, trailing text is ignored
    off = 0
    for _ in range(count):
        m = floatre.match(text, off)
        if m is None:
            return False
        off = m.end()
    return True

def posValid(valu):
    return _scanFloats(valu, 2)

def pos3dValid(valu):
    return _scanFloats(valu, 3)

def floatValid(valu):
    return _scanFloats(valu, 1)

def uomValid(valu):
    return valu in ('degrees', 'radians')

unbounded = -1

# (shape, ((attr, mincount, maxcount, validator), ...))
# Ellipse is defined twice ( 2d and 3d ) and lookups use the last definition.
shapedefs = (
    ('Point', (
        ('pos', 1, 1, posValid),
    )),
    ('Polygon', (
        ('pos', 3, unbounded, posValid),
    )),
    ('Circle', (
        ('pos', 1, 1, posValid),
        ('radius', 1, 1, floatValid),
    )),
    ('Ellipse', (
        ('pos', 1, 1, posValid),
        ('semiMajorAxis', 1, 1, floatValid),
        ('semiMinorAxis', 1, 1, floatValid),
        ('orientation', 1, 1, floatValid),
        ('orientation_uom', 1, 1, uomValid),
    )),
    ('ArcBand', (
        ('pos', 1, 1, posValid),
        ('innerRadius', 1, 1, floatValid),
        ('outerRadius', 1, 1, floatValid),
        ('startAngle', 1, 1, floatValid),
        ('startAngle_uom', 1, 1, uomValid),
        ('openingAngle', 1, 1, floatValid),
        ('openingAngle_uom', 1, 1, uomValid),
    )),
    ('Sphere', (
        ('pos3d', 1, 1, pos3dValid),
        ('radius', 1, 1, floatValid),
    )),
    ('Ellipse', (
        ('pos3d', 1, 1, pos3dValid),
        ('semiMajorAxis', 1, 1, floatValid),
        ('semiMinorAxis', 1, 1, floatValid),
        ('verticalAxis', 1, 1, floatValid),
        ('orientation', 1, 1, floatValid),
        ('orientation_uom', 1, 1, uomValid),
    )),
    ('Prism', (
        ('pos3d', 3, unbounded, posValid),
        ('height', 1, 1, floatValid),
    )),
)

def getShapeDefs():
    return shapedefs

def getShapeDef(shape):
    '''
    Get the attribute definitions for a shape type.

    Returns:
        tuple: The attribute definitions or None if the shape is unknown.
    '''
    attrs = None
    for name, defs in shapedefs:
        if name == shape:
            attrs = defs
    return attrs

def validate(vlist):
    '''
    Validate a GML location variable list against its shape definition.

    Args:
        vlist (VarList): The variables to check.  The "type" variable selects the shape.

    Raises:
        NoShapeType: If there is no "type" variable.
        BadShapeType: If the type is not a known shape.
        BadVarName: If a variable is not an attribute of the shape.
        BadVarValu: If a variable value is not valid for the attribute.
        NotEnoughVars: If an attribute occurs fewer than its minimum times.
        TooManyVars: If an attribute occurs more than its maximum times.
    '''
    shape = vlist.get('type')
    if shape is None:
        raise g_exc.NoShapeType(mesg='GML location has no "type" variable')

    attrs = getShapeDef(shape)
    if attrs is None:
        raise g_exc.BadShapeType(mesg=f'Unknown GML shape type {shape!r}', type=shape)

    valids = {name: func for (name, minc, maxc, func) in attrs}

    for name, valu in vlist:

        if name == 'type':
            continue

        func = valids.get(name)
        if func is None:
            raise g_exc.BadVarName(mesg=f'{name!r} is not a valid attribute of a {shape}', name=name, type=shape)

        if not func(valu):
            raise g_exc.BadVarValu(mesg=f'Invalid value {valu!r} for {name!r}', name=name, valu=valu, type=shape)

    for name, minc, maxc, func in attrs:

        count = vlist.count(name)
        if count < minc:
            mesg = f'A {shape} requires at least {minc} {name!r} but has {count}'
            raise g_exc.NotEnoughVars(mesg=mesg, name=name, type=shape)

        if maxc >= 0 and count > maxc:
            mesg = f'A {shape} allows at most {maxc} {name!r} but has {count}'
            raise g_exc.TooManyVars(mesg=mesg, name=name, type=shape)
