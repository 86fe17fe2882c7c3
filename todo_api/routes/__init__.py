"""
Todo API — Routes Package
===========================

Route Inventory:
    - todos.py:   GET    /todos                  (list all tasks)
                  POST   /todos/add              (create)
                  GET    /todos/view/{id}        (view one)
                  PUT    /todos/update/{id}      (rewrite title/description)
                  PATCH  /todos/done/{id}        (mark done)
                  DELETE /todos/delete/{id}      (delete)
    - health.py:  GET    /health                 (database check)

Routes stay thin: decode the request, call TaskService, return a schema.
"""
