"""Resumable upload pipeline."""

from .byte_source import ByteSource, FileSource, UrlSource, make_byte_source
from .chunk_assembler import ChunkAssembler
from .chunk_uploader import ChunkUploader
from .models import Continue, Done, Failed, Transition, UploadSession, UploadState
from .session_negotiator import SessionNegotiator
from .upload_controller import UploadController, resumable_upload

__all__ = [
    "ByteSource",
    "ChunkAssembler",
    "ChunkUploader",
    "Continue",
    "Done",
    "Failed",
    "FileSource",
    "SessionNegotiator",
    "Transition",
    "UploadController",
    "UploadSession",
    "UploadState",
    "UrlSource",
    "make_byte_source",
    "resumable_upload",
]
