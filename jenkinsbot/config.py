import logging

import munch
from voluptuous import All
from voluptuous import Length
from voluptuous import MultipleInvalid
from voluptuous import Optional
from voluptuous import Range
from voluptuous import Required
from voluptuous import Schema
import yaml

from jenkinsbot import exceptions as excp
from jenkinsbot import message as m
from jenkinsbot import utils

LOG = logging.getLogger(__name__)

_non_empty_str = All(str, Length(min=1))
_pos_number = Range(min=0, min_included=False)

# Seconds mattermost waits on a slash command reply; waiting on a queued
# build must stay below it.
COMMAND_REPLY_TIMEOUT = 30

# Mattermost refuses uploads larger than this by default.
MAX_ARTIFACT_SIZE = 50 * 1024 * 1024

SCHEMA = Schema({
    Required("jenkins"): {
        Required("url"): _non_empty_str,
        Optional("timeout", default=30): _pos_number,
        Optional("max_build_wait", default=10): Range(
            min=0, max=COMMAND_REPLY_TIMEOUT,
            min_included=False, max_included=False),
        Optional("max_artifact_size", default=MAX_ARTIFACT_SIZE): All(
            int, Range(min=1)),
    },
    Required("mattermost"): {
        Required("url"): _non_empty_str,
        Required("token"): _non_empty_str,
        Optional("display_name",
                 default=m.DEFAULT_DISPLAY_NAME): _non_empty_str,
        Optional("profile_image_url", default=''): str,
        Optional("timeout", default=30): _pos_number,
    },
    Required("hook"): {
        Required("port"): All(int, Range(min=0, max=65535)),
        Optional("path", default="jenkins"): _non_empty_str,
        Optional("exposed", default=False): bool,
        Optional("token", default=''): str,
        Optional("max_workers"): All(int, Range(min=1)),
    },
    Optional("ssl"): {
        Optional("cert"): {Required("path"): _non_empty_str},
        Optional("private_key"): {Required("path"): _non_empty_str},
    },
    Required("persistent_working_dir"): _non_empty_str,
})


def validate(raw_config):
    try:
        config = SCHEMA(raw_config)
    except MultipleInvalid as e:
        raise excp.ConfigError("Invalid configuration: %s" % e)
    return munch.munchify(config)


def load(path):
    LOG.info("Loading configuration from '%s'", path)
    try:
        with open(path, 'r') as fh:
            raw_config = yaml.safe_load(fh)
    except (IOError, yaml.YAMLError) as e:
        raise excp.ConfigError(
            "Could not read configuration at '%s': %s" % (path, e))
    if not isinstance(raw_config, dict):
        raise excp.ConfigError(
            "Expected a mapping at the top of '%s', got %s" % (
                path, type(raw_config).__name__))
    config = validate(raw_config)
    if LOG.isEnabledFor(logging.DEBUG):
        LOG.debug("Loaded configuration: %s",
                  utils.mask_dict_password(munch.unmunchify(config)))
    return config
