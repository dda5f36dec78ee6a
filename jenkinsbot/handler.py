# -*- coding: utf-8 -*-

import abc
import collections
import logging

import munch
from oslo_utils import excutils
from oslo_utils import reflection
from oslo_utils import timeutils
from voluptuous import humanize
from voluptuous import Invalid

from jenkinsbot import exceptions as excp
from jenkinsbot import message as m
from jenkinsbot import utils

LOG = logging.getLogger(__name__)


class HandlerABCMeta(abc.ABCMeta):
    def __new__(cls, name, parents, dct):
        # Each derived class gets its *own* stats; a class level
        # dictionary would be shared by every subclass.
        dct['stats'] = munch.Munch({
            'ran': 0,
            'failed': 0,
            'total_run_time': 0,
        })
        return super(HandlerABCMeta, cls).__new__(cls, name, parents, dct)


class Handler(object, metaclass=HandlerABCMeta):
    handles_what = {
        'action': None,
    }

    # Names of the bot clients that must exist for this handler
    # to be usable (see: is_enabled).
    required_clients = None

    def __init__(self, bot, invocation):
        self.bot = bot
        self.invocation = invocation
        self.config = bot.config
        self.state_history = []
        self.state = None
        self.watch = timeutils.StopWatch()

    def change_state(self, target_state):
        self.state_history.append((self.state, target_state))
        self.state = target_state

    @staticmethod
    def _format_voluptuous_error(data, validation_error,
                                 max_sub_error_length=500):
        """Turns a voluptuous invalid data error into something more readable."""  # noqa: E501
        return humanize.humanize_error(
            data, validation_error,
            max_sub_error_length=max_sub_error_length)

    @classmethod
    def is_enabled(cls, bot):
        cls_name = reflection.get_class_name(cls, fully_qualified=True)
        nice_cls_name = "Handler '%s'" % cls_name
        if cls.required_clients:
            for client_name in sorted(cls.required_clients):
                client = bot.clients.get(client_name)
                if client is None:
                    LOG.warning("%s has been disabled, missing required"
                                " '%s' client", nice_cls_name, client_name)
                    return False
        return True

    @classmethod
    def handles(cls, invocation):
        action = cls.handles_what.get('action')
        if not action:
            return False
        return invocation.action == action

    @classmethod
    def _get_args_message(cls, kind):
        args_def = cls.handles_what.get('args', {})
        return args_def.get('messages', {}).get(kind, '')

    @classmethod
    def extract_arguments(cls, invocation):
        args_def = cls.handles_what.get('args', {})
        args_order = args_def.get('order', [])
        parameters = list(invocation.parameters)
        if len(parameters) < len(args_order):
            raise excp.ArgumentError(cls._get_args_message('missing'))
        if len(parameters) > len(args_order):
            raise excp.ArgumentError(cls._get_args_message('extra'))
        return collections.OrderedDict(zip(args_order, parameters))

    @classmethod
    def validate_arguments(cls, args):
        try:
            args_def = cls.handles_what['args']
        except KeyError:
            pass
        else:
            args_schema = args_def.get("schema")
            if args_schema is not None:
                try:
                    args_schema(args)
                except Invalid as e:
                    raise ValueError(cls._format_voluptuous_error(args, e))

    @abc.abstractmethod
    def _run(self, *args, **kwargs):
        pass

    def run(self):
        with self.watch:
            self.change_state("PARSING")
            try:
                args = self.extract_arguments(self.invocation)
            except excp.ArgumentError as e:
                self.change_state("PARSING_FAILED")
                raise excp.HandlerReportedIssues(
                    self.__class__, str(e), invocation=self.invocation)
            self.change_state("VALIDATING")
            try:
                self.validate_arguments(args)
            except ValueError as e:
                self.change_state("VALIDATING_FAILED")
                raise excp.HandlerReportedIssues(
                    self.__class__, str(e), invocation=self.invocation)
            self.change_state("RUNNING")
            try:
                result = self._run(**args)
            except Exception:
                with excutils.save_and_reraise_exception():
                    self.change_state(self.state + "_SADLY_FAILED")
            else:
                self.change_state(self.state + "_HAPPILY_FINISHED")
                if result is None:
                    result = m.make_empty_response()
                return result

    def respond(self, text, response_type=m.EPHEMERAL):
        return self.bot.host.make_response(response_type, text)

    def reply_ephemeral(self, text):
        """Posts a message only the invoking user sees.

        Returns whether the host accepted the post; a failed post is
        logged and otherwise ignored.
        """
        try:
            self.bot.host.post_ephemeral(self.invocation.user_id,
                                         self.invocation.channel_id, text)
        except excp.HostError:
            LOG.warning("Failed posting ephemeral message %r for %s",
                        utils.chop(text, max_size=200), self.invocation,
                        exc_info=True)
            return False
        return True

    def log_error(self, what, **fields):
        self.bot.host.log_error(what, **fields)

    @classmethod
    def has_help(cls):
        return bool(cls.handles_what.get('usage'))

    @classmethod
    def get_help(cls, trigger):
        lines = []
        for usage, description in cls.handles_what.get('usage', []):
            lines.append(u"* `%s %s` - %s" % (trigger.text, usage,
                                              description))
        return lines


class JobHandler(Handler):
    """Base for handlers that act on a single (maybe quoted) job name."""

    required_clients = ('jenkins_client', 'credential_store')

    @classmethod
    def extract_arguments(cls, invocation):
        parameters = invocation.parameters
        if not parameters:
            raise excp.ArgumentError(cls._get_args_message('missing'))
        if len(parameters) == 1:
            job_name = parameters[0]
        else:
            try:
                job_name = utils.parse_job_name(parameters)
            except excp.ArgumentError as e:
                LOG.debug("Could not rebuild a job name out of %s: %s",
                          list(parameters), e)
                raise excp.ArgumentError(cls._get_args_message('invalid'))
        return collections.OrderedDict([('job_name', job_name)])

    def fetch_credentials(self):
        user_id = self.invocation.user_id
        record = self.bot.clients.credential_store.fetch(user_id)
        if record is None:
            raise excp.NotConnected(user_id)
        return record
