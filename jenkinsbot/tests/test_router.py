import mock
from testtools import TestCase

from jenkinsbot import exceptions as excp
from jenkinsbot import jenkins_utils as ju
from jenkinsbot import message as m
from jenkinsbot import router
from jenkinsbot.handlers import jenkins as jenkins_handlers
from jenkinsbot.tests import common


class RouterTest(TestCase):
    def setUp(self):
        super(RouterTest, self).setUp()
        self.bot = common.make_bot(connected_users=['u1'])
        self.jenkins_client = self.bot.clients.jenkins_client
        self.jenkins_client.trigger_build.return_value = ju.BuildInfo(
            'job', 1, 'http://j/job/job/1/')

    def execute(self, command, **kwargs):
        return self.bot.router.execute(common.make_args(command, **kwargs))

    def test_wrong_trigger_no_side_effects(self):
        resp = self.execute("/jira build job")
        self.assertEqual(m.make_empty_response(), resp)
        self.assertEqual({}, resp.to_dict())
        self.assertEqual([], self.bot.host.ephemerals)
        self.assertEqual([], self.bot.host.errors)
        self.assertEqual([], self.jenkins_client.mock_calls)

    def test_no_action(self):
        self.assertTrue(self.execute("/jenkins").empty)
        self.assertTrue(self.execute("   ").empty)

    def test_unknown_action(self):
        self.assertTrue(self.execute("/jenkins deploy job").empty)
        self.assertEqual([], self.jenkins_client.mock_calls)

    def test_build_no_job(self):
        resp = self.execute("/jenkins build")
        self.assertEqual(m.EPHEMERAL, resp.response_type)
        self.assertEqual("Please specify a job name to build.", resp.text)
        self.assertEqual("Jenkins", resp.username)

    def test_connect_one_parameter(self):
        resp = self.execute("/jenkins connect alice")
        self.assertEqual(m.EPHEMERAL, resp.response_type)
        self.assertEqual("Please specify both username and API token.",
                         resp.text)
        self.assertEqual([], self.jenkins_client.mock_calls)

    def test_build_quoted(self):
        resp = self.execute('/jenkins build "my job"')
        self.jenkins_client.trigger_build.assert_called_once_with(
            mock.ANY, 'my job')
        self.assertIn("Build for the job 'my job' has been started.",
                      resp.text)

    def test_build_folder_unmodified(self):
        self.execute("/jenkins build folder/job")
        self.jenkins_client.trigger_build.assert_called_once_with(
            mock.ANY, 'folder/job')

    def test_build_unquoted_words(self):
        resp = self.execute("/jenkins build my job")
        self.assertEqual(
            "Please check `/jenkins help` to find information"
            " on how to trigger a job.", resp.text)
        self.assertEqual([], self.jenkins_client.mock_calls)
        self.assertEqual([], self.bot.host.errors)

    def test_not_connected(self):
        resp = self.execute("/jenkins build job", user_id='stranger')
        self.assertEqual(router.NOT_CONNECTED, resp.text)
        self.assertEqual([], self.jenkins_client.mock_calls)
        self.assertEqual([], self.bot.host.errors)

    def test_store_read_failure(self):
        store = mock.MagicMock()
        store.fetch.side_effect = excp.StoreError("disk gone")
        self.bot.clients.credential_store = store
        resp = self.execute("/jenkins test-results job")
        self.assertEqual("Error reading your Jenkins credentials.",
                         resp.text)
        self.assertEqual(1, len(self.bot.host.errors))

    def test_unexpected_failure(self):
        failed = jenkins_handlers.BuildHandler.stats.failed
        self.jenkins_client.trigger_build.side_effect = KeyError("url")
        resp = self.execute("/jenkins build job")
        self.assertTrue(resp.empty)
        self.assertEqual(failed + 1,
                         jenkins_handlers.BuildHandler.stats.failed)

    def test_stats(self):
        ran = jenkins_handlers.BuildHandler.stats.ran
        self.execute("/jenkins build job")
        self.assertEqual(ran + 1, jenkins_handlers.BuildHandler.stats.ran)
        self.assertIsNot(jenkins_handlers.BuildHandler.stats,
                         jenkins_handlers.ConnectHandler.stats)

    def test_find_handler(self):
        invocation = common.make_invocation("/jenkins get-artifacts job")
        self.assertIs(jenkins_handlers.ArtifactsHandler,
                      self.bot.router.find_handler(invocation))
        invocation = common.make_invocation("/jenkins nope")
        self.assertIsNone(self.bot.router.find_handler(invocation))
