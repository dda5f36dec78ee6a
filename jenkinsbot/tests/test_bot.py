import mock
from testtools import TestCase

from jenkinsbot import bot as b
from jenkinsbot import trigger
from jenkinsbot.tests import common


class BotTest(TestCase):
    def setUp(self):
        super(BotTest, self).setUp()
        for name in ('_fetch_jenkins_client', '_fetch_credential_store',
                     '_fetch_host'):
            patcher = mock.patch('jenkinsbot.bot.%s' % name)
            setattr(self, name.lstrip("_"), patcher.start())
            self.addCleanup(patcher.stop)
        self.bot = b.Bot(common.make_config())

    def test_setup(self):
        self.bot.setup()
        self.assertIs(self.fetch_host.return_value, self.bot.host)
        self.assertIs(self.fetch_jenkins_client.return_value,
                      self.bot.clients.jenkins_client)
        self.fetch_jenkins_client.assert_called_once_with(
            self.bot.config, dead=self.bot.dead)
        self.assertEqual(list(b.HANDLERS), self.bot.router.handlers)
        self.assertEqual(trigger.JENKINS, self.bot.router.trigger)

    def test_setup_missing_client(self):
        self.fetch_credential_store.return_value = None
        self.bot.setup()
        self.assertEqual([b.HANDLERS[-1]], self.bot.router.handlers)

    @mock.patch('jenkinsbot.bot.wsgi_server.create_server')
    def test_run_and_stop(self, create_server):
        server = create_server.return_value
        server.start.side_effect = lambda: self.bot.stop()
        self.bot.run()
        server.setup.assert_called_once_with()
        server.shutdown.assert_called_once_with()
        credential_store = self.fetch_credential_store.return_value
        credential_store.close.assert_called_once_with()
        self.assertEqual({}, dict(self.bot.clients))
