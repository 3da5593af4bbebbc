'''
An ordered list of (name, valu) string variables.

The VarList is the common currency between the location records, the
validators and the effective profiles.  Names are not unique; lookups
return the first match.
'''
import geoloc.exc as g_exc

def _split(text, char, quote=None):
    '''
    Split text on char, ignoring any char found inside a quoted section.

    Quote characters and backslash escapes are left in place.
    '''
    parts = []
    part = []

    inquote = False
    escaped = False

    for c in text:

        if escaped:
            part.append(c)
            escaped = False
            continue

        if inquote and c == '\\':
            part.append(c)
            escaped = True
            continue

        if quote is not None and c == quote:
            inquote = not inquote
            part.append(c)
            continue

        if c == char and not inquote:
            parts.append(''.join(part))
            part = []
            continue

        part.append(c)

    parts.append(''.join(part))
    return parts

def _unquote(text, quote=None):

    text = text.strip()
    if quote is None:
        return text

    if len(text) < 2 or text[0] != quote or text[-1] != quote:
        return text

    ret = []
    escaped = False
    for c in text[1:-1]:
        if escaped:
            ret.append(c)
            escaped = False
            continue
        if c == '\\':
            escaped = True
            continue
        ret.append(c)

    return ''.join(ret)

def _quote(text, quote):
    text = text.replace('\\', '\\\\').replace(quote, '\\' + quote)
    return f'{quote}{text}{quote}'

class VarList:
    '''
    An ordered list of name=valu string variables.

    Args:
        items (list): Optional (name, valu) tuples to populate the list with.
    '''
    def __init__(self, items=()):
        self._items = []
        for name, valu in items:
            self.append(name, valu)

    @classmethod
    def parse(cls, text, sep=',', eq='=', quote='"'):
        '''
        Parse a delimited string into a VarList.

        Args:
            text (str): The text to parse such as ``country=AU, A1="New South Wales"``.
            sep (str): The item separator.
            eq (str): The name/value separator.
            quote (str): The quote character used to protect separators in values.

        Notes:
            Whitespace around items, names and values is removed and one level of
            quoting is removed from names and values.  Items with no name are
            skipped and items with no value are given an empty value.

        Returns:
            VarList: The parsed list, which may be empty.
        '''
        vlist = cls()
        if text is None:
            return vlist

        for item in _split(text, sep, quote=quote):

            if not item.strip():
                continue

            parts = _split(item, eq, quote=quote)

            name = _unquote(parts[0], quote=quote)
            if not name:
                continue

            valu = ''
            if len(parts) > 1:
                valu = _unquote(eq.join(parts[1:]), quote=quote)

            vlist.append(name, valu)

        return vlist

    @classmethod
    def norm(cls, valu):
        '''
        Construct a VarList from a string, a mapping, a list of pairs or a VarList.
        '''
        if valu is None:
            return cls()

        if isinstance(valu, VarList):
            return valu.copy()

        if isinstance(valu, str):
            return cls.parse(valu)

        if isinstance(valu, dict):
            return cls([(str(k), _normValu(v)) for (k, v) in valu.items()])

        if isinstance(valu, (list, tuple)):
            items = []
            for item in valu:
                if not isinstance(item, (list, tuple)) or len(item) != 2:
                    raise g_exc.BadArg(mesg=f'Variable list items must be (name, valu) pairs: {item!r}')
                items.append((str(item[0]), _normValu(item[1])))
            return cls(items)

        raise g_exc.BadArg(mesg=f'Invalid variable list type: {type(valu).__name__}')

    def join(self, sep=',', eq='=', quote='"'):
        '''
        Serialize the list to a delimited string.

        Args:
            sep (str): The item separator.
            eq (str): The name/value separator.
            quote (str): The quote character to wrap values in or None.

        Returns:
            str: The serialized list.
        '''
        if quote is None:
            return sep.join([f'{name}{eq}{valu}' for (name, valu) in self._items])
        return sep.join([f'{name}{eq}{_quote(valu, quote)}' for (name, valu) in self._items])

    def get(self, name, defv=None):
        '''
        Return the value of the first variable with the given name.
        '''
        for vnam, valu in self._items:
            if vnam == name:
                return valu
        return defv

    def has(self, name):
        return any(vnam == name for (vnam, valu) in self._items)

    def count(self, name):
        return len([vnam for (vnam, valu) in self._items if vnam == name])

    def append(self, name, valu):
        self._items.append((str(name), str(valu)))

    def replace(self, name, valu):
        '''
        Replace the value of the first variable with the given name.

        Returns:
            bool: False if there was no variable to replace.
        '''
        for i, (vnam, oldv) in enumerate(self._items):
            if vnam == name:
                self._items[i] = (vnam, str(valu))
                return True
        return False

    def merge(self, refinement):
        '''
        Return a copy of this list with each refinement variable applied in order.

        Each refinement variable replaces the first variable of the same name
        or is appended if there is none.  Variables are applied one at a time
        so a later refinement of the same name overwrites an earlier one.
        '''
        ret = self.copy()
        for name, valu in refinement:
            if not ret.replace(name, valu):
                ret.append(name, valu)
        return ret

    def copy(self):
        return VarList(self._items)

    def names(self):
        return [name for (name, valu) in self._items]

    def items(self):
        return list(self._items)

    def pack(self):
        return [list(item) for item in self._items]

    def __iter__(self):
        return iter(list(self._items))

    def __len__(self):
        return len(self._items)

    def __bool__(self):
        return bool(self._items)

    def __eq__(self, othr):
        if isinstance(othr, VarList):
            return self._items == othr._items
        return NotImplemented

    def __repr__(self):
        return f'VarList({self.join()})'

def _normValu(valu):
    if isinstance(valu, bool):
        return 'yes' if valu else 'no'
    if valu is None:
        return ''
    return str(valu)
