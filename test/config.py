#!/usr/bin/env python3

from io import StringIO

from utest import *
import hof.config
from hof.config import *
from hof.trace import *


utest(Config(), load_config, {})
utest(Config(trace=True, sched='manual'), load_config, {'HOF_TRACE': 'Yes', 'HOF_SCHED': ' Manual '})
utest(Config(trace=False), load_config, {'HOF_TRACE': 'off'})
utest_exc(ConfigError("HOF_TRACE: invalid boolean: 'maybe'"), load_config, {'HOF_TRACE': 'maybe'})
utest_exc(ConfigError, load_config, {'HOF_SCHED': 'fiber'})


utest('a=1 b=true c= d="x y" e=""', fmt_fields, {'a': 1, 'b': True, 'c': None, 'd': 'x y', 'e': ''})
utest('msg="k=v" q=\\"q\\"', fmt_fields, {'msg': 'k=v', 'q': '"q"'})
utest('len', fn_name, len)


def trace_output(enabled):
  prev = hof.config.config
  hof.config.config = Config(trace=enabled)
  try:
    f = StringIO()
    trace(file=f, gate='debounce', fn='save', event='arm', delay=0.5)
    return f.getvalue()
  finally:
    hof.config.config = prev

utest('hof: gate=debounce fn=save event=arm delay=0.5\n', trace_output, True)
utest('', trace_output, False)
