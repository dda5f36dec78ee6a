import logging
import threading

import jenkins
from oslo_utils import reflection
from oslo_utils import timeutils
import requests

from jenkinsbot import exceptions as excp

LOG = logging.getLogger(__name__)

# Status codes jenkins answers with when the user/token pair is not valid.
UNAUTHORIZED_STATUSES = frozenset([401, 403])


class Artifact(object):
    def __init__(self, file_name, relative_path, content):
        self.file_name = file_name
        self.relative_path = relative_path
        self.content = content

    def __repr__(self):
        cls_name = reflection.get_class_name(self, fully_qualified=False)
        return "%s(%r, %s bytes)" % (cls_name, self.relative_path,
                                     len(self.content))


class BuildInfo(object):
    def __init__(self, job_name, number, url, artifacts=None, skipped=None):
        self.job_name = job_name
        self.number = number
        self.url = url
        if artifacts is None:
            artifacts = []
        self.artifacts = artifacts
        # Relative paths of artifacts left out for being too large.
        if skipped is None:
            skipped = []
        self.skipped = skipped

    def __repr__(self):
        cls_name = reflection.get_class_name(self, fully_qualified=False)
        return "%s(%r, %r, %r)" % (cls_name, self.job_name,
                                   self.number, self.url)


class JenkinsClient(object):
    """Talks to jenkins on behalf of a connected chat user.

    Every call takes the :py:class:`~jenkinsbot.store.CredentialRecord` of
    the user it is acting for; library and http failures are turned
    into :py:class:`~jenkinsbot.exceptions.JenkinsError`.
    """

    # Seconds between queue item checks while waiting for a build.
    queued_build_info_delay = 1.0

    default_max_build_wait = 10.0
    default_max_artifact_size = 50 * 1024 * 1024
    artifact_chunk_size = 64 * 1024

    def __init__(self, base_url, timeout=None, max_build_wait=None,
                 max_artifact_size=None, dead=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        if max_build_wait is None:
            max_build_wait = self.default_max_build_wait
        self.max_build_wait = max_build_wait
        if max_artifact_size is None:
            max_artifact_size = self.default_max_artifact_size
        self.max_artifact_size = max_artifact_size
        if dead is None:
            dead = threading.Event()
        self.dead = dead

    def _make_server(self, credentials):
        kwargs = {}
        if self.timeout is not None:
            kwargs['timeout'] = self.timeout
        return jenkins.Jenkins(self.base_url,
                               username=credentials.username,
                               password=credentials.token, **kwargs)

    def verify_credentials(self, username, token):
        """Returns whether jenkins accepts the given username and token."""
        who_am_i_url = self.base_url + "/me/api/json"
        try:
            resp = requests.get(who_am_i_url, auth=(username, token),
                                timeout=self.timeout)
        except requests.RequestException as e:
            raise excp.JenkinsError(
                "Failed contacting jenkins at %s: %s" % (self.base_url, e))
        if resp.status_code in UNAUTHORIZED_STATUSES:
            LOG.debug("Jenkins rejected the credentials of '%s' (%s)",
                      username, resp.status_code)
            return False
        try:
            resp.raise_for_status()
        except requests.HTTPError as e:
            raise excp.JenkinsError(
                "Unexpected jenkins response while verifying"
                " credentials: %s" % e)
        return True

    def _wait_for_build(self, server, job_name, queue_id):
        last_item = {}
        with timeutils.StopWatch(duration=self.max_build_wait) as watch:
            while not self.dead.is_set() and not watch.expired():
                last_item = server.get_queue_item(queue_id)
                if last_item.get('cancelled'):
                    raise excp.JenkinsError(
                        "Queue item %s of job '%s' was"
                        " cancelled" % (queue_id, job_name))
                executable = last_item.get('executable')
                if executable:
                    return BuildInfo(job_name, executable['number'],
                                     executable['url'])
                LOG.debug("Still waiting on queue item %s of job '%s',"
                          " it has not started building yet",
                          queue_id, job_name)
                wait_secs = self.queued_build_info_delay
                try:
                    wait_secs = min(watch.leftover(), wait_secs)
                except RuntimeError:
                    pass
                self.dead.wait(wait_secs)
        # Still queued, so point at the queue item instead.
        queue_url = last_item.get('url') or "queue/item/%s/" % queue_id
        LOG.info("Gave up waiting on queue item %s of job '%s' to start"
                 " building", queue_id, job_name)
        return BuildInfo(job_name, None, "%s/%s" % (self.base_url,
                                                    queue_url.lstrip("/")))

    def trigger_build(self, credentials, job_name):
        server = self._make_server(credentials)
        try:
            queue_id = server.build_job(job_name)
            LOG.info("Triggered job '%s' as '%s' (queue item %s)",
                     job_name, credentials.username, queue_id)
            return self._wait_for_build(server, job_name, queue_id)
        except jenkins.NotFoundException:
            raise excp.JenkinsError("Job '%s' was not found" % job_name)
        except (jenkins.JenkinsException, requests.RequestException) as e:
            raise excp.JenkinsError(
                "Failed triggering job '%s': %s" % (job_name, e))

    def _get_build_number(self, server, job_name, build_kind):
        job_info = server.get_job_info(job_name)
        build = job_info.get(build_kind)
        if not build:
            raise excp.JenkinsError(
                "Job '%s' has no %s" % (job_name, build_kind))
        return build['number']

    def _read_artifact(self, resp):
        """Reads a streamed artifact, or returns none if it is too big."""
        try:
            declared_size = int(resp.headers.get('Content-Length', ''))
        except ValueError:
            declared_size = None
        if (declared_size is not None and
                declared_size > self.max_artifact_size):
            return None
        chunks = []
        read_size = 0
        for chunk in resp.iter_content(chunk_size=self.artifact_chunk_size):
            read_size += len(chunk)
            if read_size > self.max_artifact_size:
                return None
            chunks.append(chunk)
        return b"".join(chunks)

    def fetch_artifacts(self, credentials, job_name):
        """Downloads the artifacts of the last successful build of a job."""
        server = self._make_server(credentials)
        try:
            build_num = self._get_build_number(server, job_name,
                                               'lastSuccessfulBuild')
            build = server.get_build_info(job_name, build_num)
            build_info = BuildInfo(job_name, build_num, build['url'])
            for raw_artifact in build.get('artifacts', []):
                relative_path = raw_artifact['relativePath']
                artifact_url = "%sartifact/%s" % (build['url'],
                                                  relative_path)
                LOG.debug("Downloading artifact '%s' of job '%s' build %s",
                          relative_path, job_name, build_num)
                resp = server.jenkins_request(
                    requests.Request('GET', artifact_url), stream=True)
                try:
                    content = self._read_artifact(resp)
                finally:
                    resp.close()
                if content is None:
                    LOG.info("Skipping artifact '%s' of job '%s' build %s,"
                             " it is larger than %s bytes", relative_path,
                             job_name, build_num, self.max_artifact_size)
                    build_info.skipped.append(relative_path)
                else:
                    build_info.artifacts.append(
                        Artifact(raw_artifact['fileName'], relative_path,
                                 content))
            return build_info
        except jenkins.NotFoundException:
            raise excp.JenkinsError("Job '%s' was not found" % job_name)
        except (jenkins.JenkinsException, requests.RequestException) as e:
            raise excp.JenkinsError(
                "Failed fetching artifacts of job '%s': %s" % (job_name, e))

    def fetch_test_report_link(self, credentials, job_name):
        """Returns a message linking to the last completed build report."""
        server = self._make_server(credentials)
        try:
            build_num = self._get_build_number(server, job_name,
                                               'lastCompletedBuild')
            build = server.get_build_info(job_name, build_num)
            report = server.get_build_test_report(job_name, build_num)
        except jenkins.NotFoundException:
            raise excp.JenkinsError("Job '%s' was not found" % job_name)
        except (jenkins.JenkinsException, requests.RequestException) as e:
            raise excp.JenkinsError(
                "Failed fetching test results of"
                " job '%s': %s" % (job_name, e))
        if not report:
            return ("No test results found for the build #%s of the"
                    " job '%s'." % (build_num, job_name))
        return ("Test results for the build #%s of the job '%s'"
                " (%s failed, %s skipped): %stestReport" % (
                    build_num, job_name, report.get('failCount', 0),
                    report.get('skipCount', 0), build['url']))
