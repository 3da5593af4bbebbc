import logging

import msgspec.json as m_json

import geoloc.common as g_common

_cb = lambda x: g_common.trimText(repr(x))

class JsonFormatter(logging.Formatter):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)

    def format(self, record: logging.LogRecord):

        record.message = record.getMessage()
        mesg = self.formatMessage(record)
        ret = {
            'message': mesg,
            'logger': {
                'name': record.name,
                'process': record.processName,
                'filename': record.filename,
                'func': record.funcName,
            },
            'level': record.levelname,
            'time': self.formatTime(record, self.datefmt),
        }

        if record.exc_info:
            name, info = g_common.err(record.exc_info[1], fulltb=True)
            # This is the actual exception name. The ename key is the function name.
            info['errname'] = name
            ret['err'] = info

        # extra info for a record is passed as a single dictionary
        # under the "geoloc" key, e.g. extra={'geoloc': {'call': name}}
        extras = record.__dict__.get('geoloc')
        if extras:
            ret.update({k: v for k, v in extras.items() if k not in ret})

        return m_json.encode(ret, enc_hook=_cb).decode()
