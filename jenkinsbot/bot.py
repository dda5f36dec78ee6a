import logging
import os
import threading

import munch

from jenkinsbot import host as h
from jenkinsbot import jenkins_utils as ju
from jenkinsbot import router
from jenkinsbot import store
from jenkinsbot import trigger
from jenkinsbot import wsgi_server

from jenkinsbot.handlers import help as help_handler
from jenkinsbot.handlers import jenkins as jenkins_handlers

LOG = logging.getLogger(__name__)

# Order matters, the first handler taking an action wins.
HANDLERS = tuple([
    jenkins_handlers.ConnectHandler,
    jenkins_handlers.BuildHandler,
    jenkins_handlers.ArtifactsHandler,
    jenkins_handlers.TestResultsHandler,
    help_handler.Handler,
])


def _fetch_jenkins_client(config, dead=None):
    jenkins_config = config.jenkins
    return ju.JenkinsClient(jenkins_config.url,
                            timeout=jenkins_config.get("timeout"),
                            max_build_wait=jenkins_config.get(
                                "max_build_wait"),
                            max_artifact_size=jenkins_config.get(
                                "max_artifact_size"),
                            dead=dead)


def _fetch_credential_store(config):
    store_path = os.path.join(config.persistent_working_dir,
                              'credentials.sqlite')
    return store.CredentialStore.open(store_path)


def _fetch_host(config):
    mm_config = config.mattermost
    return h.MattermostHost(mm_config.url, mm_config.token,
                            display_name=mm_config.get("display_name"),
                            icon_url=mm_config.get("profile_image_url", ''),
                            timeout=mm_config.get("timeout"))


class Bot(object):
    idle_wait = 1.0

    def __init__(self, config, trigger=trigger.JENKINS):
        self.config = config
        self.trigger = trigger
        self.clients = munch.Munch()
        self.wsgi_servers = munch.Munch()
        self.dead = threading.Event()
        self.host = None
        self.router = None

    def setup(self):
        LOG.info("Building clients")
        self.clients.clear()
        self.clients.jenkins_client = _fetch_jenkins_client(
            self.config, dead=self.dead)
        self.clients.credential_store = _fetch_credential_store(self.config)
        self.host = _fetch_host(self.config)
        handlers = []
        for h_cls in HANDLERS:
            if h_cls.is_enabled(self):
                handlers.append(h_cls)
        LOG.info("Routing %s with %s handlers", self.trigger.text,
                 len(handlers))
        self.router = router.Router(self, handlers, trigger=self.trigger)

    def run(self):
        self.dead.clear()
        self.setup()
        server = wsgi_server.create_server(
            self, max_workers=self.config.hook.get("max_workers"))
        server.setup()
        self.wsgi_servers.command = server
        try:
            server.start()
            while not self.dead.is_set():
                self.dead.wait(self.idle_wait)
        finally:
            self._shutdown()

    def stop(self):
        self.dead.set()

    def _shutdown(self):
        for server_name in sorted(self.wsgi_servers.keys()):
            LOG.info("Shutting down wsgi server '%s'", server_name)
            self.wsgi_servers[server_name].shutdown()
        self.wsgi_servers.clear()
        credential_store = self.clients.pop('credential_store', None)
        if credential_store is not None:
            credential_store.close()
        self.clients.clear()
