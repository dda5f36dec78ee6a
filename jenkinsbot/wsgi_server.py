import logging
import re

import munch

from webob import exc
from webob import Request
from webob import Response

from jenkinsbot import message
from jenkinsbot import wsgi_utils as wu

LOG = logging.getLogger(__name__)

FORM_CONTENT_TYPE = 'application/x-www-form-urlencoded'


class CommandApplication(object):
    """Receives slash commands posted by the chat platform."""

    default_hook_path = "jenkins"

    def __init__(self, bot, hook_path=None):
        if not hook_path:
            hook_path = self.default_hook_path
        self.hook_path = hook_path.strip("/")
        self.urls = [
            (re.compile(r'^' + re.escape(self.hook_path) + r'[/]?$'),
             ["GET", "POST"], self.hook),
        ]
        self.bot = bot

    def __call__(self, environ, start_response):
        req = Request(environ)
        req_path = req.path.lstrip('/')
        req_meth = req.method
        handler = None
        for pat, ok_methods, maybe_handler in self.urls:
            if pat.match(req_path) and req_meth in ok_methods:
                handler = maybe_handler
                break
        try:
            if handler is None:
                raise exc.HTTPNotFound
            else:
                resp = handler(req)
        except exc.HTTPError as e:
            return e.generate_response(environ, start_response)
        else:
            return resp(environ, start_response)

    def hook(self, req):
        req_meth = req.method
        if req_meth.lower() != "post":
            LOG.warning("Received invalid command request"
                        " type/http method (not a POST)")
            raise exc.HTTPBadRequest
        content_type = (req.content_type or '').lower()
        if content_type != FORM_CONTENT_TYPE:
            LOG.warning("Received invalid command content"
                        " type %s (not %s)", content_type, FORM_CONTENT_TYPE)
            raise exc.HTTPBadRequest
        form = req.POST
        expected_token = self.bot.config.hook.get('token', '')
        if expected_token:
            try:
                wu.check_token(form.get('token'), expected_token)
            except (wu.NoToken, wu.BadToken):
                LOG.warning("Received no/bad verification token for"
                            " command from user '%s'", form.get('user_id'))
                raise exc.HTTPUnauthorized
        if not form.get('command'):
            LOG.warning("Received command request without a command")
            raise exc.HTTPBadRequest
        args = message.CommandArgs.from_form(form)
        LOG.debug("Received command %s", args)
        cmd_resp = self.bot.router.execute(args)
        resp = Response(content_type='application/json', charset='utf-8')
        resp.json_body = cmd_resp.to_dict()
        resp.status = 200
        return resp


def create_server(bot, max_workers=None):
    hook_config = bot.config.hook
    ssl_config = bot.config.get("ssl", munch.Munch())
    wsgi_app = CommandApplication(bot, hook_path=hook_config.get('path'))
    return wu.WSGIServerRunner(ssl_config, wsgi_app, hook_config.port,
                               exposed=hook_config.get('exposed', False),
                               max_workers=max_workers)
