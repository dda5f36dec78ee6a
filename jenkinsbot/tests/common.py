import mock
import munch

from jenkinsbot import bot as b
from jenkinsbot import host as h
from jenkinsbot import jenkins_utils as ju
from jenkinsbot import message as m
from jenkinsbot import router
from jenkinsbot import store
from jenkinsbot import trigger


class DummyHost(h.Host):
    def __init__(self, display_name="Jenkins",
                 icon_url="http://example.com/jenkins.png"):
        super(DummyHost, self).__init__(display_name=display_name,
                                        icon_url=icon_url)
        self.ephemerals = []
        self.uploads = []
        self.errors = []

    def post_ephemeral(self, user_id, channel_id, text):
        self.ephemerals.append((user_id, channel_id, text))

    def upload_files(self, user_id, channel_id, text, artifacts):
        self.uploads.append((user_id, channel_id, text, list(artifacts)))

    def log_error(self, what, **fields):
        self.errors.append((what, fields))


class MockBrain(object):
    def __init__(self, initial=None):
        self.storage = {}
        if initial:
            self.storage.update(initial)

    def keys(self):
        return list(self.storage.keys())

    def get(self, k, default=None):
        return self.storage.get(k, default)

    def __setitem__(self, k, v):
        self.storage[k] = v

    def __getitem__(self, k):
        return self.storage[k]

    def __delitem__(self, k):
        del self.storage[k]

    def sync(self):
        pass

    def close(self):
        pass


def make_config():
    return munch.munchify({
        'jenkins': {
            'url': 'http://jenkins.example.com',
            'timeout': 30,
            'max_build_wait': 10,
        },
        'mattermost': {
            'url': 'http://chat.example.com',
            'token': 'bot-token',
            'display_name': 'Jenkins',
            'profile_image_url': 'http://example.com/jenkins.png',
            'timeout': 30,
        },
        'hook': {
            'port': 65532,
            'path': 'jenkins',
            'exposed': False,
            'token': '',
        },
        'persistent_working_dir': '/tmp',
    })


def make_bot(connected_users=None):
    bot = mock.MagicMock()
    bot.config = make_config()
    bot.host = DummyHost()
    bot.clients = munch.Munch()
    bot.clients.jenkins_client = mock.create_autospec(
        ju.JenkinsClient, instance=True)
    bot.clients.credential_store = store.CredentialStore(MockBrain())
    for user_id in (connected_users or []):
        bot.clients.credential_store.store(
            store.CredentialRecord(user_id, user_id + "-jenkins", "secret"))
    bot.router = router.Router(bot, b.HANDLERS)
    return bot


def make_args(command, user_id="u1", channel_id="c1"):
    return m.CommandArgs(command, user_id=user_id, channel_id=channel_id,
                         team_id="t1",
                         response_url="http://chat.example.com/hooks/1")


def make_invocation(command, user_id="u1", channel_id="c1"):
    args = make_args(command, user_id=user_id, channel_id=channel_id)
    _matched, invocation = trigger.JENKINS.match(command, args=args)
    return invocation
