class BaseException(Exception):
    def __init__(self, what='', invocation=None):
        super(BaseException, self).__init__(what)
        self.invocation = invocation


class HandlerReportedIssues(BaseException):
    def __init__(self, handler_cls, handler_issues, invocation=None):
        super(HandlerReportedIssues, self).__init__(invocation=invocation)
        self.handler_cls = handler_cls
        self.handler_issues = handler_issues


class ArgumentError(BaseException):
    pass


class NotConnected(BaseException):
    def __init__(self, user_id):
        super(NotConnected, self).__init__(
            what="User '%s' has not connected to jenkins" % user_id)
        self.user_id = user_id


class JenkinsError(BaseException):
    pass


class StoreError(BaseException):
    pass


class HostError(BaseException):
    pass


class ConfigError(BaseException):
    pass
