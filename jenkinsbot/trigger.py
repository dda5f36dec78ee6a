from jenkinsbot import utils


def _clean_text(text):
    text = text.strip().lower()
    if not text.startswith("/"):
        text = "/" + text
    return text


class CommandInvocation(object):
    """A single command line split into trigger, action and parameters."""

    def __init__(self, trigger, action, parameters, args=None):
        self._trigger = trigger
        self._action = action
        self._parameters = tuple(parameters)
        self._args = args

    @property
    def trigger(self):
        return self._trigger

    @property
    def action(self):
        return self._action

    @property
    def parameters(self):
        return self._parameters

    @property
    def args(self):
        return self._args

    @property
    def user_id(self):
        if self._args is None:
            return ''
        return self._args.user_id

    @property
    def channel_id(self):
        if self._args is None:
            return ''
        return self._args.channel_id

    def __repr__(self):
        return "CommandInvocation(%r, %r, %r)" % (
            self._trigger, self._action, list(self._parameters))


class Trigger(object):
    def __init__(self, text, description='', display_name='',
                 auto_complete=True, auto_complete_desc='',
                 auto_complete_hint=''):
        self._text = _clean_text(text)
        self.description = description
        self.display_name = display_name
        self.auto_complete = auto_complete
        self.auto_complete_desc = auto_complete_desc
        self.auto_complete_hint = auto_complete_hint

    @property
    def text(self):
        return self._text

    def __eq__(self, other):
        if not isinstance(other, Trigger):
            return NotImplemented
        return self.text == other.text

    def __ne__(self, other):
        return not self.__eq__(other)

    def __hash__(self):
        return hash(self.text)

    def to_dict(self):
        """Registration details for the chat platform."""
        return {
            'trigger': self.text.lstrip("/"),
            'description': self.description,
            'display_name': self.display_name,
            'auto_complete': self.auto_complete,
            'auto_complete_desc': self.auto_complete_desc,
            'auto_complete_hint': self.auto_complete_hint,
        }

    def match(self, command_text, args=None):
        pieces = utils.split_command(command_text)
        if not pieces or pieces[0] != self._text:
            return (False, None)
        action = ''
        if len(pieces) > 1:
            action = pieces[1]
        return (True, CommandInvocation(pieces[0], action,
                                        pieces[2:], args=args))


JENKINS = Trigger(
    'jenkins', description="A chat command to interact with Jenkins",
    display_name="Jenkins",
    auto_complete_desc=("Available commands: connect, build,"
                        " get-artifacts, test-results, help"),
    auto_complete_hint="[command]")
