import Helpers
import WarningLog
from Failures import ArgumentError
from RunContext import EDGES, SITES, ORIGINAL_SUFFIX

def getSiteNetIDs (context, sites):
    """ netIDs of all networks that hold at least one site of the given maps. """
    netIDs = set()
    for name in sites:
        netIDs.update(context.getMap(name, "Did you run calcSites()?").getNetIDs())
    return netIDs

def restrictNetwork (context, sites = (SITES,), keepNetIDs = None, deleteNetIDs = None, keep = True, filename = EDGES + ORIGINAL_SUFFIX):
    """ Reduce the edges to the networks that hold sites.

    :param sites: Names of prepared site maps.
    :param keepNetIDs: Keep exactly these networks. Takes precedence over sites and deleteNetIDs.
    :param deleteNetIDs: Networks to drop even if they hold sites.
    :param keep: Store the unrestricted edges under filename. An existing map of that name is kept,
        so repeated restrictions do not replace the unrestricted edges. calcEdges drops 'edges_o'.

    :return: The restricted edges. """
    edges = context.getMap(EDGES, "Did you run calcEdges()?")
    if keep and filename == EDGES:
        raise ArgumentError("filename", "the unrestricted edges cannot be stored as '" + EDGES + "'")
    if isinstance(sites, str):
        sites = [sites]

    if keepNetIDs is not None:
        netIDs = set(keepNetIDs)
    else:
        netIDs = getSiteNetIDs(context, sites)
        if deleteNetIDs is not None:
            netIDs -= set(deleteNetIDs)

    removed = [netID for netID in edges.getNetIDs() if netID not in netIDs]
    if __debug__:
        print("Keeping networks " + Helpers.formatList(sorted(netIDs)) + ", removing " + str(len(removed)) + " networks")

    restricted = edges.copy(netIDs = netIDs)
    #a backup from an earlier restriction holds more networks than the current edges
    if keep and not context.hasMap(filename):
        context.addMap(filename, edges)
    context.addMap(EDGES, restricted)

    if len(restricted.segments) == 0:
        context.warningLog.addWarning(WarningLog.MED_PRIORITY, WarningLog.EMPTY_NETWORK_WARNING, EDGES, "No edges are left after restricting the network.", count = 0)
    return restricted
