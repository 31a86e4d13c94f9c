class ImportPipelineError(Exception):
    """Fatal to a whole import job (as opposed to a single rejected row)."""


class CsvParseError(ImportPipelineError):
    pass


class ConnectionNotFoundError(ImportPipelineError):
    def __init__(self, connection_id: int):
        super().__init__("Connection not found")
        self.connection_id = connection_id
