#errors raised by the network preparation stages
#any of these aborts the current stage. Maps written by earlier stages stay valid

class SSNError (Exception):
    """ Base class of all errors raised while preparing the network. """
    pass

class PrerequisiteError (SSNError):
    """ A named map needed by a stage is missing from the run context.

    :param mapName: The name of the missing map.
    :param hint: Optional text naming the stage that produces the map. """
    def __init__(self, mapName, hint = ""):
        self.mapName = mapName
        self.hint = hint
        message = "'" + str(mapName) + "' not found."
        if len(hint) > 0:
            message += " " + hint
        super().__init__(message)

class GraphExtractionError (SSNError):
    """ The stream or flow direction rasters are empty or inconsistent. """
    pass

class TopologyError (SSNError):
    """ A graph invariant is violated (multiple outlets, cycles, disconnected networks). """
    pass

class ArgumentError (SSNError):
    """ A parameter is missing, invalid, or references a column that does not exist. """
    def __init__(self, parameter, message):
        self.parameter = parameter
        super().__init__(str(parameter) + ": " + message)

class DataQualityWarning (UserWarning):
    """ Non fatal condition. Recorded in the WarningLog, never raised by the stages.

    :param mapName: The map the warning is about.
    :param count: How many features are affected.
    :param threshold: The threshold that was applied, if any. """
    def __init__(self, mapName, message, count = None, threshold = None):
        self.mapName = mapName
        self.count = count
        self.threshold = threshold
        super().__init__(message)
