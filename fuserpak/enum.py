from enum import Flag


class Compliant(Flag):
    '''It indicates which degree of compliantness the data must reflect the format.

    A field with INHERIT asks its father, so setting the flags on a chunk makes
    the whole subtree strict.'''
    NONE  = 0
    ENUM  = 1 << 0
    MAGIC = 1 << 1
    INHERIT = 1 << 2
