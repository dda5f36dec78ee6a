import logging
import sqlite3
import threading

from oslo_serialization import msgpackutils as mu
from oslo_utils import reflection
import sqlitedict

from jenkinsbot import exceptions as excp
from jenkinsbot import utils

LOG = logging.getLogger(__name__)
KEY_PREFIX = "jenkins_user_info"

# What sqlitedict (and the sqlite3 module under it) may raise when the
# backing file is unusable.
_STORE_ERRORS = (sqlite3.Error, EnvironmentError, RuntimeError)


class CredentialRecord(object):
    """Jenkins credentials a chat user connected with."""

    def __init__(self, user_id, username, token):
        self.user_id = user_id
        self.username = username
        self.token = token

    def __eq__(self, other):
        if not isinstance(other, CredentialRecord):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __ne__(self, other):
        return not self.__eq__(other)

    def __repr__(self):
        cls_name = reflection.get_class_name(self, fully_qualified=False)
        return "%s(user_id=%r, username=%r, token=%r)" % (
            cls_name, self.user_id, self.username, utils.SECRETE)

    def to_dict(self):
        return {
            'user_id': self.user_id,
            'username': self.username,
            'token': self.token,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(data['user_id'], data['username'], data['token'])


def _make_key(user_id):
    return "%s/%s" % (KEY_PREFIX, user_id)


class CredentialStore(object):
    def __init__(self, brain, lock=None):
        self.brain = brain
        if lock is None:
            lock = threading.Lock()
        self.lock = lock

    @classmethod
    def open(cls, path, tablename='jenkinsbot'):
        LOG.info("Opening (or creating) credential store at '%s'", path)
        brain = sqlitedict.SqliteDict(
            filename=path, tablename=tablename,
            autocommit=True, flag='c',
            encode=mu.dumps, decode=mu.loads)
        return cls(brain)

    def store(self, record):
        key = _make_key(record.user_id)
        try:
            with self.lock:
                self.brain[key] = record.to_dict()
        except _STORE_ERRORS as e:
            raise excp.StoreError(
                "Failed storing credentials of user"
                " '%s': %s" % (record.user_id, e))
        LOG.debug("Stored %s", record)

    def fetch(self, user_id):
        key = _make_key(user_id)
        try:
            with self.lock:
                data = self.brain.get(key)
        except _STORE_ERRORS as e:
            raise excp.StoreError(
                "Failed fetching credentials of user"
                " '%s': %s" % (user_id, e))
        if data is None:
            return None
        return CredentialRecord.from_dict(data)

    def delete(self, user_id):
        key = _make_key(user_id)
        try:
            with self.lock:
                try:
                    del self.brain[key]
                except KeyError:
                    return False
        except _STORE_ERRORS as e:
            raise excp.StoreError(
                "Failed deleting credentials of user"
                " '%s': %s" % (user_id, e))
        return True

    def close(self):
        with self.lock:
            LOG.info("Syncing and closing credential store")
            self.brain.sync()
            self.brain.close()
