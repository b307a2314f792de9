# Dedicated to the public domain under CC0: https://creativecommons.org/publicdomain/zero/1.0/.

'''
Configuration from environment variables.
* HOF_TRACE: truthy value enables diagnostic trace lines on stderr.
* HOF_SCHED: `thread` or `manual`; selects the default scheduler used outside of a running asyncio loop.
'''

from dataclasses import dataclass
from os import environ
from typing import Mapping


class ConfigError(ValueError): pass


sched_kinds = ('thread', 'manual')

_truthy = frozenset(('1', 'true', 'yes', 'on'))
_falsy = frozenset(('', '0', 'false', 'no', 'off'))


@dataclass(frozen=True)
class Config:
  trace:bool = False
  sched:str = 'thread'


def parse_bool(name:str, val:str) -> bool:
  v = val.strip().lower()
  if v in _truthy: return True
  if v in _falsy: return False
  raise ConfigError(f'{name}: invalid boolean: {val!r}')


def load_config(env:Mapping[str,str]=environ) -> Config:
  'Build a Config from `env`, which defaults to `os.environ`.'
  trace = parse_bool('HOF_TRACE', env.get('HOF_TRACE', ''))
  sched = env.get('HOF_SCHED', '').strip().lower() or 'thread'
  if sched not in sched_kinds:
    raise ConfigError(f'HOF_SCHED: invalid scheduler kind: {sched!r}; expected one of: {", ".join(sched_kinds)}')
  return Config(trace=trace, sched=sched)


config = load_config()
