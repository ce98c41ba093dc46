from collections import OrderedDict

class SiteIDManager (object):
    """ Maps the values of a user id column to dense integers.

    Values are numbered from 1 in the order they are first seen, so the same input
    always gives the same ids. """

    def __init__(self):
        self.ids = OrderedDict()

    def getID (self, value):
        """ Get the id of value, assigning the next free id if value is new. """
        if value not in self.ids:
            self.ids[value] = len(self.ids) + 1
        return self.ids[value]

    def encode (self, values):
        """ Get the ids of a list of values.

        :return: A list of ints, one per value. """
        return [self.getID(value) for value in values]
