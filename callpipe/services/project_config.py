from ..errors import ConfigurationError
from ..models.device import CallerDevice


class ProjectConfigResolver:
    """callerId -> caller device -> assigned project -> AnalysisConfig."""

    def __init__(self, session):
        self.session = session

    def resolve(self, caller_id):
        device = (
            self.session.query(CallerDevice)
            .filter(CallerDevice.imei == caller_id, CallerDevice.deleted.is_(False))
            .first()
        )
        if device is None:
            raise ConfigurationError(f'No caller device registered for callerId {caller_id}',
                                     caller_id=caller_id)
        project = device.project
        if project is None or project.deleted:
            raise ConfigurationError(f'Caller device {caller_id} has no assigned project',
                                     caller_id=caller_id)
        return project.config or {}
