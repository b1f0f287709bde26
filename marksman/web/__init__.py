# Copyright (c) 2025 sprouee
