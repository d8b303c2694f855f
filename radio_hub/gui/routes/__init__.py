"""Flask blueprints for Radio Hub"""
