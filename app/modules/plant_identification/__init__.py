# 📄 File: app/modules/plant_identification/__init__.py
# 🧭 Purpose (Layman Explanation):
# The plant scanner: you send a photo, it tells you which plant it most likely is.
# 🧪 Purpose (Technical Summary):
# Plant identification module (domain, infrastructure and presentation layers).
# 🔗 Dependencies:
# app.shared (config, exceptions, logging, database, storage)
# 🔄 Connected Modules / Calls From:
# app.main, app.api.v1.router
