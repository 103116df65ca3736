# -*- coding: utf-8 -*-

"""Reading the YAML configuration file. The file has a required `responder`
section and an optional `logging` section:

    responder:
      default_notice: /srv/fido/freq/notice.txt
      catalog: /srv/fido/freq/magic.yaml
      finalize_failure: log        # or rollback
      notice_policy: on_failure    # or always
      require_existing: false
    logging:                       # logging.config.dictConfig schema
      ...

Everything a session needs is copied into an immutable `ResponderConfig`
and passed in explicitly; nothing here is process-wide state except the
logging setup done by `config_logging`."""

from collections import namedtuple
import logging
import logging.config

import yaml

from .exceptions import ConfigError


logger = logging.getLogger(__name__)

# finalize_failure values
LOG = 'log'
ROLLBACK = 'rollback'
# notice_policy values
ON_FAILURE = 'on_failure'
ALWAYS = 'always'

REQUIRED_OPTIONS = {'default_notice', 'catalog'}
LEGAL_OPTIONS = REQUIRED_OPTIONS | set('''
    finalize_failure
    notice_policy
    require_existing
'''.split())
CHOICES = {
    'finalize_failure': (LOG, ROLLBACK),
    'notice_policy': (ON_FAILURE, ALWAYS),
}


_ResponderConfig = namedtuple(
    '_ResponderConfig',
    'default_notice catalog finalize_failure notice_policy require_existing')


class ResponderConfig(_ResponderConfig):
    """Per-session settings. Build with `from_mapping`."""
    __slots__ = ()

    @classmethod
    def from_mapping(cls, responder_config):
        """Validate the `responder` section of the configuration file and
        return a `ResponderConfig`. Raises `ConfigError`."""
        if not isinstance(responder_config, dict):
            raise ConfigError('responder section must be a mapping')
        check_for_illegal_options(responder_config)
        options = dict(finalize_failure=LOG,
                       notice_policy=ON_FAILURE,
                       require_existing=False)
        options.update({k: v for k, v in responder_config.items()
                        if v is not None})
        for key, choices in CHOICES.items():
            if options[key] not in choices:
                raise ConfigError(
                    f'{key} must be one of {", ".join(choices)}, '
                    f'not {options[key]!r}')
        if not isinstance(options['require_existing'], bool):
            raise ConfigError('require_existing must be true or false')
        options['default_notice'] = str(options['default_notice'])
        if set('\r\n') & set(options['default_notice']):
            raise ConfigError('line break in default_notice')
        options['catalog'] = str(options['catalog'])
        return cls(**options)

    @property
    def rollback_on_finalize_failure(self):
        return self.finalize_failure == ROLLBACK

    @property
    def always_notice(self):
        return self.notice_policy == ALWAYS


def load_config_file(config_file):
    """Return the parsed configuration file as a `dict`."""
    try:
        with open(config_file, encoding='utf-8') as fin:
            config = yaml.safe_load(fin)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f'cannot load config file: {e}',
                          path=str(config_file)) from e
    if not isinstance(config, dict):
        raise ConfigError('config file must be a mapping',
                          path=str(config_file))
    return config


def check_for_illegal_options(responder_config):
    """Raise `ConfigError` on unknown or missing responder options."""
    illegal_options = set(responder_config) - LEGAL_OPTIONS
    if illegal_options:
        raise ConfigError(
            f'illegal responder options: {sorted(illegal_options)!r}')
    missing_options = {k for k in REQUIRED_OPTIONS
                       if responder_config.get(k) is None}
    if missing_options:
        raise ConfigError(
            f'missing responder options: {sorted(missing_options)!r}')


def config_logging(logging_config_dict, level=logging.NOTSET):
    """Apply the `logging` section of the config file. Without one, log to
    stderr at `level`. Raises `ConfigError` if the section is rejected by
    `logging.config.dictConfig`."""
    if logging_config_dict:
        try:
            config = dict(logging_config_dict,
                          version=1,
                          disable_existing_loggers=False)
            logging.config.dictConfig(config)
        except (ValueError, TypeError, AttributeError, ImportError) as e:
            raise ConfigError(f'bad logging section: {e}') from e
    else:
        logging.basicConfig(level=level)
