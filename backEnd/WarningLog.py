import collections
from Failures import DataQualityWarning

SNAP_DISTANCE_WARNING = "[low priority] DISTANT SNAPS REMOVED"
PREDICTION_COUNT_WARNING = "[low priority] PREDICTION SITE COUNT"
EMPTY_NETWORK_WARNING = "[medium priority] EMPTY NETWORK"

LOW_PRIORITY = "lowPriority"
MED_PRIORITY = "mediumPriority"
HIGH_PRIORITY = "highPriority"

Warning = collections.namedtuple('Warning', 'priority category warning')

class WarningLog (object):
    """ Collects the non fatal warnings of one run. """

    def __init__(self, workspace = None):
        self.basicInfo = "Network preparation"
        if workspace is not None:
            self.basicInfo += " in " + str(workspace)
        self.warningInfo = {LOW_PRIORITY:[], MED_PRIORITY:[], HIGH_PRIORITY:[]}

    def addWarningTuple (self, warning):
        self.warningInfo[warning.priority].append(warning)
        if __debug__:
            print(warning.category + ": " + str(warning.warning))

    def addWarning (self, priority, category, mapName, message, count = None, threshold = None):
        """ Record a DataQualityWarning and return it. """
        dataWarning = DataQualityWarning(mapName, message, count = count, threshold = threshold)
        self.addWarningTuple(Warning(priority = priority, category = category, warning = dataWarning))
        return dataWarning

    def getWarnings (self, category = None):
        """ Get the recorded DataQualityWarnings, optionally only those of one category. """
        results = []
        for priority in self.warningInfo:
            for warning in self.warningInfo[priority]:
                if category is None or warning.category == category:
                    results.append(warning.warning)
        return results

    def getFormattedMessage (self):
        output = self.basicInfo + "\n\n"
        for priority in self.warningInfo:
            numMessages = len(self.warningInfo[priority])
            if numMessages > 0:
                output += priority + "\n"
                for warning in self.warningInfo[priority]:
                    output += "\t " + warning.category + ": " + str(warning.warning) + "\n"

        return output

    def getJSONStruct (self):
        struct = {}
        for priority, warnings in self.warningInfo.items():
            struct[priority] = [{"category":w.category, "map":w.warning.mapName, "body":str(w.warning), "count":w.warning.count, "threshold":w.warning.threshold} for w in warnings]
        return struct
