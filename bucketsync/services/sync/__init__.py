"""
笔记库同步服务模块
"""

from bucketsync.services.sync.service import FileStatus, NotTextFileError, SyncService

__all__ = ['SyncService', 'FileStatus', 'NotTextFileError']
