from abc import ABC, abstractmethod

from folder_monitor.session import ImageFoundCallback, MonitoringSession


class BaseFolderMonitor(ABC):
    @abstractmethod
    def start_monitoring(self, on_image_found: ImageFoundCallback) -> MonitoringSession:
        pass

    @abstractmethod
    def stop_monitoring(self) -> None:
        pass

    @property
    @abstractmethod
    def is_monitoring(self) -> bool:
        pass
