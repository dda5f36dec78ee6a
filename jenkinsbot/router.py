import logging

from oslo_utils import excutils
from oslo_utils import reflection

from jenkinsbot import exceptions as excp
from jenkinsbot import message as m
from jenkinsbot import trigger as t

LOG = logging.getLogger(__name__)

NOT_CONNECTED = ("Please connect your Jenkins account first using"
                 " `/jenkins connect <username> <API token>`.")


class Router(object):
    """Turns a raw command line into a response.

    A command line whose first word is not the trigger, or whose action
    no handler takes (including no action at all), gets the empty
    response and nothing else happens.
    """

    def __init__(self, bot, handlers, trigger=t.JENKINS):
        self.bot = bot
        self.handlers = list(handlers)
        self.trigger = trigger

    def find_handler(self, invocation):
        for h_cls in self.handlers:
            if h_cls.handles(invocation):
                return h_cls
        return None

    def _run_handler(self, h_cls, invocation):
        h = h_cls(self.bot, invocation)
        h_cls_stats = h_cls.stats
        h_cls_stats.ran += 1
        try:
            result = h.run()
        except Exception:
            with excutils.save_and_reraise_exception():
                h_cls_stats.failed += 1
                try:
                    h_cls_stats.total_run_time += h.watch.elapsed()
                except RuntimeError:
                    pass
        else:
            try:
                h_cls_stats.total_run_time += h.watch.elapsed()
            except RuntimeError:
                pass
            return result

    def execute(self, args):
        matched, invocation = self.trigger.match(args.command, args=args)
        if not matched:
            return m.make_empty_response()
        h_cls = self.find_handler(invocation)
        if h_cls is None:
            LOG.debug("No handler takes action %r of %s, ignoring it",
                      invocation.action, invocation)
            return m.make_empty_response()
        host = self.bot.host
        LOG.debug("Running %s for %s",
                  reflection.get_class_name(h_cls), invocation)
        try:
            return self._run_handler(h_cls, invocation)
        except excp.HandlerReportedIssues as e:
            return host.make_response(m.EPHEMERAL, e.handler_issues)
        except excp.NotConnected:
            return host.make_response(m.EPHEMERAL, NOT_CONNECTED)
        except excp.StoreError as e:
            host.log_error("Error reading Jenkins user information",
                           user_id=invocation.user_id, err=str(e))
            return host.make_response(
                m.EPHEMERAL, "Error reading your Jenkins credentials.")
        except Exception:
            LOG.exception("Processing %s failed", invocation)
            return m.make_empty_response()
