"""Error taxonomy for a validation run.

Only `InitializationFailure` is ever raised: structural violations, catalog
gaps and unclassified messages all end up as entries in the diagnostic list.
"""


class InitializationFailure(Exception):
    """A schema, rule table or rule set could not be read or compiled.

    Raised before any parsing starts; the orchestrator turns it into a failed
    run instead of letting it reach the caller.
    """

    def __init__(self, resource, reason):
        self.resource = str(resource)
        self.reason = str(reason)
        super().__init__(f"{self.resource}: {self.reason}")
