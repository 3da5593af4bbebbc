'''
JSON schema validation of geoloc definitions and engine options.

Engine options ( such as ``default:language`` ) are defined by a mapping of
option name to a JSON schema property.  Values come from command line options
first, then from ``GEOLOC_*`` environment variables; the schema defaults fill
in whatever is left when the configuration is validated.
'''
import os
import json
import logging
import collections.abc as c_abc

import yaml
import fastjsonschema

from fastjsonschema.exceptions import JsonSchemaValueException

import geoloc.exc as g_exc

logger = logging.getLogger(__name__)

draft07 = 'http://json-schema.org/draft-07/schema#'

# compiled validators keyed by the JSON text of their schema
_validators = {}

def getJsSchema(props):
    '''
    Get a JSON schema for an object with the given properties and no others.

    Args:
        props (dict): A mapping of property name to JSON schema.

    Returns:
        dict: The draft 7 object schema.
    '''
    return {
        '$schema': draft07,
        'type': 'object',
        'additionalProperties': False,
        'properties': dict(props),
    }

def getJsValidator(schema):
    '''
    Get a cached fastjsonschema validator for a schema.

    The validator returns the data with schema defaults inserted and raises
    SchemaViolation for invalid data.
    '''
    schema = dict(schema)
    schema.setdefault('$schema', draft07)

    key = json.dumps(schema, sort_keys=True)
    func = _validators.get(key)
    if func is not None:
        return func

    comp = fastjsonschema.compile(schema, use_default=True)

    def valid(data):
        try:
            return comp(data)
        except JsonSchemaValueException as e:
            raise g_exc.SchemaViolation(mesg=e.message, name=e.name) from None

    _validators[key] = valid
    return valid

def envarName(name, prefix='geoloc'):
    '''
    Get the environment variable for an option, such as ``GEOLOC_LOG_LEVEL`` for ``log:level``.
    '''
    return f'{prefix}_{name.replace(":", "_")}'.upper()

argtypes = {
    'string': str,
    'integer': int,
    'number': float,
    'boolean': yaml.safe_load,
}

class Config(c_abc.Mapping):
    '''
    Engine options validated against their JSON schema definitions.

    Args:
        confdefs (dict): A mapping of option name to JSON schema property.
        prefix (str): The environment variable prefix.
    '''
    def __init__(self, confdefs, prefix='geoloc'):
        self.confdefs = confdefs
        self.prefix = prefix

        self.conf = {}
        self._optnames = {}

        self.validator = getJsValidator(getJsSchema(confdefs))
        self._propvalids = {name: getJsValidator(info) for (name, info) in confdefs.items()}

    def set(self, name, valu):
        '''
        Validate and set an option.

        Raises:
            BadArg: If the option is not defined.
            BadConfValu: If the value is not valid for the option.
        '''
        valid = self._propvalids.get(name)
        if valid is None:
            raise g_exc.BadArg(mesg=f'Unknown option {name!r}', name=name)

        try:
            valid(valu)
        except g_exc.SchemaViolation as e:
            raise g_exc.BadConfValu(mesg=f'Invalid config for {name}, {e.get("mesg")}', name=name, valu=valu) from None

        self.conf[name] = valu

    def getArgParseArgs(self):
        '''
        Get the (argname, kwargs) pairs used to add the options to an argparse parser.

        Boolean options are only added when they have a default.
        '''
        retn = []

        for name, info in self.confdefs.items():

            atyp = argtypes.get(info.get('type'))
            if atyp is None:
                continue

            helptext = info.get('description', '')

            kwargs = {'type': atyp}
            if info.get('type') == 'boolean':
                defv = info.get('default')
                if defv is None:
                    logger.debug('Option %s is a boolean with no default and has no command line argument', name)
                    continue
                kwargs['choices'] = (True, False)
                helptext = f'{helptext} This option defaults to {defv}.'

            kwargs['help'] = helptext

            self._optnames[name.replace(':', '_')] = name
            retn.append(('--' + name.replace(':', '-'), kwargs))

        return retn

    def setConfFromOpts(self, opts):
        '''
        Set options from an argparse namespace built with getArgParseArgs().
        '''
        for attr, valu in vars(opts).items():
            name = self._optnames.get(attr)
            if name is None or valu is None:
                continue
            if name not in self.conf:
                self.set(name, valu)

    def setConfFromEnvs(self):
        '''
        Set options which are not already set from environment variables.

        Environment variable values are decoded as YAML, so ``GEOLOC_LOG_STRUCT=true``
        sets a boolean.

        Returns:
            dict: The options which were set.
        '''
        updates = {}
        for name in self.confdefs:

            envar = envarName(name, prefix=self.prefix)
            text = os.getenv(envar)
            if text is None:
                continue

            if name in self.conf:
                logger.debug('Option %s is already set, ignoring %s', name, envar)
                continue

            valu = yaml.safe_load(text)
            self.set(name, valu)
            updates[name] = valu

        return updates

    def reqConfValid(self):
        '''
        Validate the options and fill in the defaults of any which are not set.

        Raises:
            BadConfValu: If the options are not valid.
        '''
        try:
            self.conf = self.validator(self.conf)
        except g_exc.SchemaViolation as e:
            raise g_exc.BadConfValu(mesg=f'Invalid configuration: {e.get("mesg")}', name=e.get('name')) from None

    def __getitem__(self, name):
        return self.conf[name]

    def __iter__(self):
        return iter(self.conf)

    def __len__(self):
        return len(self.conf)

    def __repr__(self):
        return f'<geoloc.lib.config.Config prefix={self.prefix!r} conf={self.conf}>'
