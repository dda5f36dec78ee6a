# -*- coding: utf-8 -*-

import logging

from oslo_utils import strutils

from jenkinsbot import exceptions as excp

SECRETE = '***'
QUOTE = '"'
LOG = logging.getLogger(__name__)
NAUGHTY_DOUBLE_QUOTES = tuple([
    u"\u201c",
    u"\u201d",
])


def normalize_quotes(text):
    # Some clients (OSX especially) autocorrect into these, which would
    # otherwise never be seen as opening or closing a job name.
    for c in NAUGHTY_DOUBLE_QUOTES:
        text = text.replace(c, QUOTE)
    return text


def split_command(command_text):
    """Splits raw command text into whitespace separated tokens."""
    return normalize_quotes(command_text).split()


def parse_job_name(parameters):
    """Rebuilds a job name from more than one command parameter.

    Only a double quoted phrase may span parameters, for example
    ``"folder name/job name"`` arrives as ``['"folder', 'name/job',
    'name"']`` and becomes ``folder name/job name``. Anything else
    (unquoted words, a missing closing quote, words trailing the closing
    quote) raises :py:class:`~jenkinsbot.exceptions.ArgumentError` instead
    of guessing at which words make up the job.

    Quotes are not unescaped, so a job name that itself contains a
    double quote can not be expressed.
    """
    parameters = list(parameters)
    if len(parameters) <= 1:
        raise excp.ArgumentError(
            "Expected more than one parameter, got %s" % len(parameters))
    if not parameters[0].startswith(QUOTE):
        raise excp.ArgumentError(
            "Job names made of more than one word"
            " must be enclosed in double quotes")
    closing_idx = None
    for i, piece in enumerate(parameters):
        if i == 0 and len(piece) == 1:
            # A lone quote opens the phrase, it can not also close it.
            continue
        if piece.endswith(QUOTE):
            closing_idx = i
            break
    if closing_idx is None:
        raise excp.ArgumentError("No closing double quote found")
    if closing_idx + 1 != len(parameters):
        raise excp.ArgumentError(
            "%s unexpected parameters found after the"
            " closing double quote" % (len(parameters) - closing_idx - 1))
    job_name = " ".join(parameters[0:closing_idx + 1])
    job_name = job_name[1:-1]
    if not job_name.strip():
        raise excp.ArgumentError("Job name can not be empty")
    return job_name


def mask_dict_password(config):
    return strutils.mask_dict_password(config, secret=SECRETE)


def mask_password(text):
    return strutils.mask_password(text, secret=SECRETE)


def chop(text, max_size=4000):
    small_text = text[0:max_size]
    if len(small_text) < len(text):
        small_text += "..."
    return small_text


def iter_chunks(items, chunk_size):
    if chunk_size <= 0:
        raise ValueError("Chunk size must be greater than zero")
    batch = []
    for item in items:
        batch.append(item)
        if len(batch) >= chunk_size:
            yield batch
            batch = []
    if batch:
        yield batch
