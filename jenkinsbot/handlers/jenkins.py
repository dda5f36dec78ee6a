# -*- coding: utf-8 -*-

import logging

from voluptuous import All
from voluptuous import Length
from voluptuous import Required
from voluptuous import Schema

from jenkinsbot import exceptions as excp
from jenkinsbot import handler
from jenkinsbot import message as m
from jenkinsbot import store

LOG = logging.getLogger(__name__)

JOB_NOT_SPECIFIED = "Please specify a job name to build."
JENKINS_CONNECTED = "Jenkins has been connected."


class ConnectHandler(handler.Handler):
    """Connects your chat account to Jenkins."""

    handles_what = {
        'action': 'connect',
        'args': {
            'order': [
                'username',
                'token',
            ],
            'schema': Schema({
                Required("username"): All(str, Length(min=1)),
                Required("token"): All(str, Length(min=1)),
            }),
            'messages': {
                'missing': "Please specify both username and API token.",
                'extra': ("Too many parameters. Usage:"
                          " `/jenkins connect <username> <API token>`"),
            },
        },
        'usage': [
            ('connect <username> <API token>',
             'Connect your chat account to Jenkins'),
        ],
    }
    required_clients = ('jenkins_client', 'credential_store')

    def _run(self, username, token):
        user_id = self.invocation.user_id
        self.reply_ephemeral("Validating Jenkins credentials...")
        jenkins_client = self.bot.clients.jenkins_client
        try:
            verified = jenkins_client.verify_credentials(username, token)
        except excp.JenkinsError as e:
            self.log_error("Error verifying Jenkins credentials",
                           user_id=user_id, err=str(e))
            return self.respond("Error connecting to Jenkins.")
        if not verified:
            return self.respond("Incorrect username or token")
        record = store.CredentialRecord(user_id, username, token)
        try:
            self.bot.clients.credential_store.store(record)
        except excp.StoreError as e:
            self.log_error("Error saving Jenkins user information",
                           user_id=user_id, err=str(e))
            return self.respond("Error saving your Jenkins credentials.")
        return self.respond(JENKINS_CONNECTED)


class BuildHandler(handler.JobHandler):
    """Triggers a jenkins job build."""

    handles_what = {
        'action': 'build',
        'args': {
            'order': [
                'job_name',
            ],
            'messages': {
                'missing': JOB_NOT_SPECIFIED,
                'invalid': ("Please check `/jenkins help` to find"
                            " information on how to trigger a job."),
            },
        },
        'usage': [
            ('build <job name>', 'Trigger a job build'),
            ('build "<job name with space>"',
             'Trigger a job which has space in the job name.'
             ' Note the double quotes'),
            ('build <folder>/<job name>',
             "Trigger a job inside a folder. Note the character '/'"),
            ('build "<folder name>/<job name with space>"',
             'Trigger a job inside a folder with space in job name or'
             " folder name. Note double quotes and the character '/'"),
        ],
    }

    def _run(self, job_name):
        credentials = self.fetch_credentials()
        jenkins_client = self.bot.clients.jenkins_client
        try:
            build = jenkins_client.trigger_build(credentials, job_name)
        except excp.JenkinsError as e:
            self.log_error("Error triggering build", job_name=job_name,
                           user_id=self.invocation.user_id, err=str(e))
            return self.respond(
                "Error triggering build for the job '%s'." % job_name)
        return self.respond(
            "Build for the job '%s' has been started.\n"
            "Here's the build URL : %s." % (job_name, build.url))


class ArtifactsHandler(handler.JobHandler):
    """Uploads the artifacts of the last successful build of a job."""

    handles_what = {
        'action': 'get-artifacts',
        'args': {
            'order': [
                'job_name',
            ],
            'messages': {
                'missing': JOB_NOT_SPECIFIED,
                'invalid': ("Please check `/jenkins help` to find"
                            " information on how to get build artifacts."),
            },
        },
        'usage': [
            ('get-artifacts <job name>',
             'Get the artifacts of the last successful build of a job'),
        ],
    }

    def _run(self, job_name):
        credentials = self.fetch_credentials()
        jenkins_client = self.bot.clients.jenkins_client
        self.reply_ephemeral("Fetching build artifacts of '%s'..." % job_name)
        try:
            build = jenkins_client.fetch_artifacts(credentials, job_name)
            if build.artifacts:
                self.bot.host.upload_files(
                    self.invocation.user_id, self.invocation.channel_id,
                    "Build artifacts of the job '%s' (build #%s)." % (
                        job_name, build.number),
                    build.artifacts)
        except (excp.JenkinsError, excp.HostError) as e:
            self.log_error("Error fetching artifacts", job_name=job_name,
                           user_id=self.invocation.user_id, err=str(e))
            return self.respond("Error fetching artifacts.")
        if build.skipped:
            skipped = ", ".join(build.skipped)
            if not build.artifacts:
                return self.respond(
                    "All build artifacts of the job '%s' are too large"
                    " to upload: %s." % (job_name, skipped))
            return self.respond(
                "Some build artifacts of the job '%s' are too large"
                " to upload: %s." % (job_name, skipped))
        if not build.artifacts:
            return self.respond(
                "No build artifacts found for the job '%s'." % job_name)
        return m.make_empty_response()


class TestResultsHandler(handler.JobHandler):
    """Links to the test report of the last completed build of a job."""

    handles_what = {
        'action': 'test-results',
        'args': {
            'order': [
                'job_name',
            ],
            'messages': {
                'missing': JOB_NOT_SPECIFIED,
                'invalid': ("Please check `/jenkins help` to find"
                            " information on how to get test results"
                            " of a build."),
            },
        },
        'usage': [
            ('test-results <job name>',
             'Get the test report of the last completed build of a job'),
        ],
    }

    def _run(self, job_name):
        credentials = self.fetch_credentials()
        jenkins_client = self.bot.clients.jenkins_client
        self.reply_ephemeral("Fetching test results of '%s'..." % job_name)
        try:
            report_text = jenkins_client.fetch_test_report_link(
                credentials, job_name)
        except excp.JenkinsError as e:
            self.log_error("Error fetching test results", job_name=job_name,
                           user_id=self.invocation.user_id, err=str(e))
            return self.respond("Error fetching test results.")
        if not self.reply_ephemeral(report_text):
            return self.respond(report_text)
        return m.make_empty_response()
