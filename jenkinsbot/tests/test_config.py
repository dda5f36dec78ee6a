import os
import shutil
import tempfile

from testtools import TestCase

from jenkinsbot import config as cfg
from jenkinsbot import exceptions as excp

VALID_CONFIG = """
jenkins:
  url: http://jenkins.example.com
mattermost:
  url: http://chat.example.com
  token: bot-token
hook:
  port: 8443
  token: hook-token
persistent_working_dir: /var/lib/jenkinsbot
"""


class ConfigTest(TestCase):
    def setUp(self):
        super(ConfigTest, self).setUp()
        self.tmp_dir = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.tmp_dir)

    def write_config(self, contents):
        path = os.path.join(self.tmp_dir, "jenkinsbot.yaml")
        with open(path, 'w') as fh:
            fh.write(contents)
        return path

    def test_load_defaults(self):
        config = cfg.load(self.write_config(VALID_CONFIG))
        self.assertEqual('http://jenkins.example.com', config.jenkins.url)
        self.assertEqual(30, config.jenkins.timeout)
        self.assertEqual(10, config.jenkins.max_build_wait)
        self.assertLess(config.jenkins.max_build_wait,
                        cfg.COMMAND_REPLY_TIMEOUT)
        self.assertEqual(cfg.MAX_ARTIFACT_SIZE,
                         config.jenkins.max_artifact_size)
        self.assertEqual('Jenkins', config.mattermost.display_name)
        self.assertEqual('', config.mattermost.profile_image_url)
        self.assertEqual(8443, config.hook.port)
        self.assertEqual('jenkins', config.hook.path)
        self.assertFalse(config.hook.exposed)
        self.assertEqual('hook-token', config.hook.token)
        self.assertNotIn('ssl', config)

    def test_load_missing_file(self):
        self.assertRaises(excp.ConfigError, cfg.load,
                          os.path.join(self.tmp_dir, "nope.yaml"))

    def test_load_bad_yaml(self):
        path = self.write_config("jenkins: [unclosed")
        self.assertRaises(excp.ConfigError, cfg.load, path)

    def test_load_not_mapping(self):
        path = self.write_config("- a\n- b\n")
        self.assertRaises(excp.ConfigError, cfg.load, path)

    def test_validate_missing_section(self):
        self.assertRaises(excp.ConfigError, cfg.validate, {
            'jenkins': {'url': 'http://j'},
            'hook': {'port': 1},
            'persistent_working_dir': '/tmp',
        })

    def test_validate_bad_port(self):
        e = self.assertRaises(excp.ConfigError, cfg.validate, {
            'jenkins': {'url': 'http://j'},
            'mattermost': {'url': 'http://m', 'token': 't'},
            'hook': {'port': 70000},
            'persistent_working_dir': '/tmp',
        })
        self.assertIn('port', str(e))

    def test_validate_ssl(self):
        config = cfg.validate({
            'jenkins': {'url': 'http://j'},
            'mattermost': {'url': 'http://m', 'token': 't'},
            'hook': {'port': 443},
            'ssl': {
                'cert': {'path': '/etc/ssl/bot.crt'},
                'private_key': {'path': '/etc/ssl/bot.key'},
            },
            'persistent_working_dir': '/tmp',
        })
        self.assertEqual('/etc/ssl/bot.crt', config.ssl.cert.path)

    def test_validate_build_wait_below_reply_timeout(self):
        for max_build_wait in (cfg.COMMAND_REPLY_TIMEOUT, 60, 0):
            e = self.assertRaises(excp.ConfigError, cfg.validate, {
                'jenkins': {
                    'url': 'http://j',
                    'max_build_wait': max_build_wait,
                },
                'mattermost': {'url': 'http://m', 'token': 't'},
                'hook': {'port': 443},
                'persistent_working_dir': '/tmp',
            })
            self.assertIn('max_build_wait', str(e))
        config = cfg.validate({
            'jenkins': {'url': 'http://j', 'max_build_wait': 25},
            'mattermost': {'url': 'http://m', 'token': 't'},
            'hook': {'port': 443},
            'persistent_working_dir': '/tmp',
        })
        self.assertEqual(25, config.jenkins.max_build_wait)
