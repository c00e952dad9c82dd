class VaultSubject:
    def __init__(self):
        # Observers told about every vault write
        self.observers = []

    def attach(self, obs):
        self.observers.append(obs)

    def vault_changed(self, user_id, entry=None):
        # Runs inside the writer's transaction; observers must not commit
        for o in self.observers:
            o.update(user_id, entry)


class AlertObserver:
    def __init__(self, deriver):
        self.deriver = deriver

    def update(self, user_id, entry=None):
        self.deriver.evaluate(user_id)
