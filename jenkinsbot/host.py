import abc
import logging

from oslo_utils import reflection
import requests

from jenkinsbot import exceptions as excp
from jenkinsbot import message as m
from jenkinsbot import utils

LOG = logging.getLogger(__name__)


def _format_fields(fields):
    pieces = []
    for k in sorted(fields.keys()):
        pieces.append("%s=%s" % (k, utils.mask_password(str(fields[k]))))
    return ", ".join(pieces)


class Host(object, metaclass=abc.ABCMeta):
    """The chat platform commands arrive from and replies go to."""

    def __init__(self, display_name=m.DEFAULT_DISPLAY_NAME, icon_url=''):
        self.display_name = display_name
        self.icon_url = icon_url

    def make_response(self, response_type, text):
        return m.CommandResponse(response_type=response_type,
                                 username=self.display_name,
                                 icon_url=self.icon_url, text=text)

    def log_error(self, what, **fields):
        if fields:
            LOG.error("%s (%s)", what, _format_fields(fields))
        else:
            LOG.error("%s", what)

    @abc.abstractmethod
    def post_ephemeral(self, user_id, channel_id, text):
        pass

    @abc.abstractmethod
    def upload_files(self, user_id, channel_id, text, artifacts):
        pass


class MattermostHost(Host):
    """Host that uses the mattermost (v4) rest api."""

    api_path = "api/v4"

    #: Mattermost refuses posts with more attached files than this.
    max_files_per_post = 5

    def __init__(self, base_url, token,
                 display_name=m.DEFAULT_DISPLAY_NAME, icon_url='',
                 timeout=None, session=None):
        super(MattermostHost, self).__init__(display_name=display_name,
                                             icon_url=icon_url)
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        if session is None:
            session = requests.Session()
        self.session = session

    def __repr__(self):
        cls_name = reflection.get_class_name(self, fully_qualified=False)
        return "%s(%r)" % (cls_name, self.base_url)

    def _post(self, path, **kwargs):
        url = "%s/%s/%s" % (self.base_url, self.api_path, path)
        headers = {
            'Authorization': 'Bearer %s' % self.token,
        }
        try:
            resp = self.session.post(url, headers=headers,
                                     timeout=self.timeout, **kwargs)
            resp.raise_for_status()
            return resp.json()
        except (requests.RequestException, ValueError) as e:
            raise excp.HostError("Failed posting to '%s': %s" % (url, e))

    def post_ephemeral(self, user_id, channel_id, text):
        return self._post("posts/ephemeral", json={
            'user_id': user_id,
            'post': {
                'channel_id': channel_id,
                'message': text,
            },
        })

    def upload_files(self, user_id, channel_id, text, artifacts):
        """Uploads artifacts and then shares them in channel posts.

        Every file is uploaded before any post is made, so a refused
        upload leaves nothing half shared in the channel.
        """
        file_id_batches = []
        for batch in utils.iter_chunks(artifacts, self.max_files_per_post):
            files = []
            for artifact in batch:
                files.append(('files', (artifact.file_name,
                                        artifact.content)))
            uploaded = self._post("files", data={'channel_id': channel_id},
                                  files=files)
            file_ids = [fi['id'] for fi in uploaded.get('file_infos', [])]
            LOG.debug("Uploaded %s files for user '%s' into channel '%s'",
                      len(file_ids), user_id, channel_id)
            file_id_batches.append(file_ids)
        posts = []
        for file_ids in file_id_batches:
            posts.append(self._post("posts", json={
                'channel_id': channel_id,
                'message': text,
                'file_ids': file_ids,
            }))
        return posts
