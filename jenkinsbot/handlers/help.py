# -*- coding: utf-8 -*-

import logging

from jenkinsbot import handler

LOG = logging.getLogger(__name__)

QUOTING_NOTE = ("Job names can not contain a double quote character,"
                " quotes are only used to group a job name with spaces.")


class Handler(handler.Handler):
    """Shows what the jenkins command can do."""

    handles_what = {
        'action': 'help',
        'args': {
            'order': [],
            'messages': {
                'extra': "Usage: `/jenkins help`",
            },
        },
        'usage': [
            ('help', 'Show this help text'),
        ],
    }

    def _run(self):
        trigger = self.bot.router.trigger
        lines = []
        for h in self.bot.router.handlers:
            if not h.has_help():
                continue
            lines.extend(h.get_help(trigger))
        lines.append("")
        lines.append(QUOTING_NOTE)
        return self.respond("\n".join(lines))
