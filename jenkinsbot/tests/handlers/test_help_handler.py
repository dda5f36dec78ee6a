from testtools import TestCase

from jenkinsbot import exceptions as excp
from jenkinsbot.handlers import help
from jenkinsbot.handlers import jenkins
from jenkinsbot.tests import common


class HelpHandlerTest(TestCase):
    def test_expected_handled(self):
        self.assertTrue(help.Handler.handles(
            common.make_invocation("/jenkins help")))
        self.assertFalse(help.Handler.handles(
            common.make_invocation("/jenkins helpme")))

    def test_help(self):
        bot = common.make_bot()
        h = help.Handler(bot, common.make_invocation("/jenkins help"))
        resp = h.run()
        lines = resp.text.splitlines()
        self.assertEqual(
            "* `/jenkins connect <username> <API token>` -"
            " Connect your chat account to Jenkins", lines[0])
        self.assertIn("* `/jenkins build <job name>` - Trigger a job build",
                      lines)
        self.assertIn("* `/jenkins help` - Show this help text", lines)
        self.assertEqual(help.QUOTING_NOTE, lines[-1])
        self.assertEqual("", lines[-2])

    def test_help_only_enabled(self):
        bot = common.make_bot()
        bot.router.handlers = [jenkins.BuildHandler]
        h = help.Handler(bot, common.make_invocation("/jenkins help"))
        resp = h.run()
        self.assertNotIn("connect", resp.text)
        self.assertIn("build", resp.text)

    def test_help_extra(self):
        bot = common.make_bot()
        h = help.Handler(bot, common.make_invocation("/jenkins help me"))
        e = self.assertRaises(excp.HandlerReportedIssues, h.run)
        self.assertEqual("Usage: `/jenkins help`", e.handler_issues)
