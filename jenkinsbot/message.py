import enum

from oslo_utils import reflection

DEFAULT_DISPLAY_NAME = "Jenkins"
POST_DEFAULT = ""


class ResponseType(enum.Enum):
    """Who gets to see a command response."""

    EPHEMERAL = "ephemeral"
    """
    Only the user that invoked the command sees it.
    """

    IN_CHANNEL = "in_channel"
    """
    Everyone in the channel the command was invoked in sees it.
    """


EPHEMERAL = ResponseType.EPHEMERAL
IN_CHANNEL = ResponseType.IN_CHANNEL


class CommandArgs(object):
    """Context the chat platform sends along with a command."""

    def __init__(self, command, user_id='', channel_id='',
                 team_id='', response_url='', user_name=''):
        self.command = command
        self.user_id = user_id
        self.channel_id = channel_id
        self.team_id = team_id
        self.response_url = response_url
        self.user_name = user_name

    @classmethod
    def from_form(cls, form):
        command = form.get('command', '')
        text = form.get('text', '')
        if text:
            command = command + " " + text
        return cls(command,
                   user_id=form.get('user_id', ''),
                   channel_id=form.get('channel_id', ''),
                   team_id=form.get('team_id', ''),
                   response_url=form.get('response_url', ''),
                   user_name=form.get('user_name', ''))

    def __repr__(self):
        cls_name = reflection.get_class_name(self, fully_qualified=False)
        return "%s(%r, user_id=%r, channel_id=%r)" % (
            cls_name, self.command, self.user_id, self.channel_id)


class CommandResponse(object):
    def __init__(self, response_type=None, username='',
                 icon_url='', text='', type=POST_DEFAULT):
        self.response_type = response_type
        self.username = username
        self.icon_url = icon_url
        self.text = text
        self.type = type

    @property
    def empty(self):
        return self.response_type is None and not self.text

    def __eq__(self, other):
        if not isinstance(other, CommandResponse):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __ne__(self, other):
        return not self.__eq__(other)

    def __repr__(self):
        cls_name = reflection.get_class_name(self, fully_qualified=False)
        return "%s(%s)" % (cls_name, self.to_dict())

    def to_dict(self):
        if self.empty:
            return {}
        return {
            'response_type': self.response_type.value,
            'username': self.username,
            'icon_url': self.icon_url,
            'text': self.text,
            'type': self.type,
        }


def make_empty_response():
    return CommandResponse()
